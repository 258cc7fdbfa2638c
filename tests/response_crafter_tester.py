from datetime import datetime
from mailquery.search.models import SearchQuery, ParsedSearch
from mailquery.search.response_crafter import ResponseCrafter, build_search_description, format_date

def test_format_date():
    assert format_date(datetime(2024, 3, 5, 23, 59)) == "3/5/2024"

def test_plain_description():
    query = SearchQuery(
        keyword="quarterly report",
        sender="sarah",
        start_date=datetime(2024, 3, 1),
        end_date=datetime(2024, 3, 31, 23, 59, 59, 999000),
    )
    description = build_search_description(query)
    print(f"\nDescription: {description}")

    assert description == 'Showing emails containing "quarterly report" from sarah between 3/1/2024 and 3/31/2024'

def test_complex_description():
    query = SearchQuery(keyword='subject:"project" AND body:"budget"', is_complex_query=True)

    assert build_search_description(query) == (
        'Showing emails with subject containing "project" AND body containing "budget"'
    )

def test_subject_only_description():
    query = SearchQuery(keyword='subject:"weekly sync"', is_complex_query=True)

    assert build_search_description(query) == 'Showing emails with subject containing "weekly sync"'

def test_one_sided_ranges():
    after = SearchQuery(start_date=datetime(2024, 6, 1))
    before = SearchQuery(end_date=datetime(2024, 3, 15, 23, 59))

    assert build_search_description(after) == "Showing emails after 6/1/2024"
    assert build_search_description(before) == "Showing emails before 3/15/2024"

def test_folder_and_limit():
    query = SearchQuery(folder="[Gmail]/Sent Mail", limit=5)

    assert build_search_description(query) == "Showing emails in the Sent Mail folder (limited to 5 results)"
    assert build_search_description(query, default_limit=5) == "Showing emails in the Sent Mail folder"

def test_craft_response():
    crafter = ResponseCrafter()
    parsed = ParsedSearch(query=SearchQuery(sender="bob"), search_description="Showing emails from bob")

    empty = crafter.craft_response(parsed, {"type": "empty", "total_results": 0})
    partial = crafter.craft_response(parsed, {"type": "list", "total_results": 30, "returned_results": 20})
    single = crafter.craft_response(parsed, {"type": "list", "total_results": 1, "returned_results": 1})
    error = crafter.craft_response(parsed, {"type": "error", "message": "mailbox offline"})

    print(f"\n{empty}\n{partial}\n{single}\n{error}")
    assert empty == "Showing emails from bob: no emails found matching your query."
    assert partial == "Showing emails from bob: 20 of 30 matching emails."
    assert single == "Showing emails from bob: 1 matching email."
    assert error == "Error: mailbox offline"

def test_describe_uses_default_limit():
    crafter = ResponseCrafter(default_limit=10)

    assert crafter.describe(SearchQuery(limit=10)) == "Showing emails"

def test_verbose_crafter_logs(capsys):
    crafter = ResponseCrafter(verbose=True)
    parsed = ParsedSearch(query=SearchQuery(), search_description="Showing emails")

    crafter.craft_response(parsed, {"type": "list", "total_results": 3, "returned_results": 3})

    assert "Crafting response for 3 results" in capsys.readouterr().err
