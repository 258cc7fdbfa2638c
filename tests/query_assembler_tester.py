import pytest
from datetime import datetime
from mailquery.search.models import SearchQuery
from mailquery.search.query_assembler import QueryAssembler, parse_query
from mailquery.utils.config import SearchSettings

NOW = datetime(2024, 6, 12, 15, 30)

@pytest.fixture
def assembler():
    return QueryAssembler(SearchSettings())

def test_spam_folder(assembler):
    query = assembler.assemble("show me emails in spam folder", NOW)
    print(f"\nResult: {query.model_dump_json(indent=2)}")

    assert query.folder == "[Gmail]/Spam"
    assert query.keyword is None
    assert query.sender is None
    assert query.start_date is None
    assert query.end_date is None
    assert query.limit == 20

def test_sender_keyword_and_month(assembler):
    query = assembler.assemble("Find emails from Sarah about quarterly report received in March", NOW)
    print(f"\nResult: {query.model_dump_json(indent=2)}")

    assert query.sender == "sarah"
    assert query.keyword == "quarterly report"
    assert not query.is_complex_query
    assert query.start_date == datetime(2024, 3, 1)
    assert query.end_date == datetime(2024, 3, 31, 23, 59, 59, 999000)
    assert query.folder == "INBOX"

def test_subject_and_body(assembler):
    query = assembler.assemble("find emails with subject containing project and body containing budget", NOW)

    assert query.is_complex_query
    assert query.keyword == 'subject:"project" AND body:"budget"'

def test_top_n_from_sender(assembler):
    query = assembler.assemble("show me the top 5 emails from support team", NOW)

    assert query.limit == 5
    assert query.sender == "support team"
    assert query.keyword is None

def test_between_dates_without_year(assembler):
    query = assembler.assemble("find emails received between January 1 and January 31", NOW)

    assert query.start_date == datetime(2024, 1, 1)
    assert query.end_date == datetime(2024, 1, 31, 23, 59, 59, 999000)

def test_days_ago_single_day(assembler):
    query = assembler.assemble("3 days ago", NOW)

    assert query.start_date == datetime(2024, 6, 9)
    assert query.end_date == datetime(2024, 6, 9, 23, 59, 59, 999000)
    assert query.keyword is None

def test_last_days_is_not_a_limit(assembler):
    query = assembler.assemble("emails from the last 3 days", NOW)

    assert query.limit == 20
    assert query.start_date == datetime(2024, 6, 9)

def test_cleaned_text_fallback(assembler):
    query = assembler.assemble("budget spreadsheet", NOW)

    assert query.keyword == "budget spreadsheet"

def test_no_fallback_when_other_filters_exist(assembler):
    assert assembler.assemble("spreadsheets in trash", NOW).keyword is None
    assert assembler.assemble("spreadsheets yesterday", NOW).keyword is None

@pytest.mark.parametrize("text", ["", "   ", None, 42, ["emails"]])
def test_default_query(assembler, text):
    query = assembler.assemble(text, NOW)

    assert query == SearchQuery()
    assert query.folder == "INBOX"
    assert query.limit == 20

def test_settings_defaults_apply(monkeypatch):
    monkeypatch.setenv("MAILQUERY_DEFAULT_LIMIT", "30")
    assembler = QueryAssembler(SearchSettings())

    assert assembler.assemble("emails from bob", NOW).limit == 30
    assert assembler.assemble("top 5 emails from bob", NOW).limit == 5

def test_deterministic(assembler):
    text = "top 3 emails from alice@example.com about the offsite last week"
    first = assembler.assemble(text, NOW)
    second = assembler.assemble(text, NOW)

    assert first == second
    assert first.sender == "alice@example.com"
    assert first.keyword == "offsite"
    assert first.limit == 3

def test_failing_stage_is_ignored(assembler, monkeypatch):
    def broken(text, now):
        raise RuntimeError("boom")

    monkeypatch.setattr(assembler.temporal_resolver, "resolve", broken)
    query = assembler.assemble("emails from bob last week", NOW)

    assert query.sender == "bob"
    assert query.start_date is None

@pytest.mark.parametrize("text", [
    "last week", "between june 30 and june 1", "top 100 emails", "first 1 email",
    "emails before 01/01/2024 after 02/01/2024", "top 9999 results",
    "from december to january", "subject: hello and body: world",
])
def test_invariants(assembler, text):
    query = assembler.assemble(text, NOW)

    assert 1 <= query.limit <= 100
    if query.start_date and query.end_date:
        assert query.start_date <= query.end_date
    field_scoped = bool(query.keyword) and ("subject:" in query.keyword or "body:" in query.keyword)
    assert query.is_complex_query == field_scoped

def test_parse_returns_description(assembler):
    parsed = assembler.parse("show me emails in spam folder", NOW)

    assert parsed.original_query == "show me emails in spam folder"
    assert parsed.search_description == "Showing emails in the Spam folder"

def test_parse_query_entry_point():
    query = parse_query("emails from bob yesterday", NOW)

    assert query.sender == "bob"
    assert query.start_date == datetime(2024, 6, 11)

@pytest.mark.parametrize("text,start", [
    ("emails from the last two weeks", datetime(2024, 5, 29)),
    ("past three days", datetime(2024, 6, 9)),
])
def test_spelled_out_ranges_are_not_keywords(assembler, text, start):
    query = assembler.assemble(text, NOW)
    print(f"\nResult: {query.model_dump_json(indent=2)}")

    assert query.keyword is None
    assert query.start_date == start
    assert query.end_date == datetime(2024, 6, 12, 23, 59, 59, 999000)

def test_out_of_range_phrase_is_not_a_keyword(assembler):
    query = assembler.assemble("last 99999999999 years", NOW)

    assert query.keyword is None
    assert query.start_date is None
    assert query.end_date is None

def test_sender_name_stops_at_date(assembler):
    query = assembler.assemble("emails from john march 5", NOW)

    assert query.sender == "john"
    assert query.start_date == datetime(2024, 3, 5)
    assert query.end_date == datetime(2024, 3, 5, 23, 59, 59, 999000)
