import pytest
from mailquery.search.entity_extractor import EntityExtractor

@pytest.fixture
def extractor():
    return EntityExtractor()

@pytest.mark.parametrize("text,sender", [
    ("emails from john@example.com", "john@example.com"),
    ("messages sent by jane.doe@corp.co.uk yesterday", "jane.doe@corp.co.uk"),
    ('emails from "jane doe" about the launch', "jane doe"),
    ("find emails from sarah about quarterly report", "sarah"),
    ("show me the top 5 emails from support team", "support team"),
    ("emails from the marketing team last week", "marketing team"),
    ("anything from acme.com", "acme.com"),
    ("emails from someone at acme.io", "acme.io"),
    ("notes written by alice", "alice"),
])
def test_sender(extractor, text, sender):
    result = extractor.extract_sender(text)
    print(f"\n{text!r} -> sender {result!r}")
    assert result == sender

@pytest.mark.parametrize("text", [
    "emails from last week",
    "emails from 2 days ago",
    "emails from me",
    "emails from yesterday",
    "emails from spam folder",
    "show me everything in the inbox",
])
def test_no_sender(extractor, text):
    assert extractor.extract_sender(text) is None

@pytest.mark.parametrize("text,keyword", [
    ("find emails from sarah about quarterly report received in march", "quarterly report"),
    ("emails regarding the budget", "budget"),
    ("messages containing invoice", "invoice"),
    ("emails with the word offsite", "offsite"),
    ("search for annual review", "annual review"),
    ("search for 'annual review'", "annual review"),
    ('show me "quarterly numbers"', "quarterly numbers"),
    ("find contracts from bob", "contracts"),
])
def test_keyword(extractor, text, keyword):
    result = extractor.extract_keyword(text)
    print(f"\n{text!r} -> keyword {result!r}")
    assert result == keyword

def test_temporal_phrase_is_not_a_keyword(extractor):
    assert extractor.extract_keyword("emails about last week") is None
    assert extractor.extract_keyword("find emails") is None

def test_quoted_sender_is_not_a_keyword(extractor):
    result = extractor.extract('emails from "jane doe"')

    assert result.sender == "jane doe"
    assert result.keyword is None

def test_subject_and_body_terms(extractor):
    result = extractor.extract("find emails with subject containing project and body containing budget")

    assert result.is_complex_query
    assert result.keyword == 'subject:"project" AND body:"budget"'
    assert result.sender is None

def test_subject_colon_form(extractor):
    result = extractor.extract("emails from bob with subject: weekly sync")

    assert result.is_complex_query
    assert result.keyword == 'subject:"weekly sync"'
    assert result.sender == "bob"

def test_inverse_field_form(extractor):
    result = extractor.extract("messages mentioning refund in the body")

    assert result.is_complex_query
    assert result.keyword == 'body:"refund"'

def test_plain_keyword_is_not_complex(extractor):
    result = extractor.extract("emails about the offsite")

    assert not result.is_complex_query
    assert result.keyword == "offsite"

def test_build_field_query():
    assert EntityExtractor.build_field_query("a b", None) == 'subject:"a b"'
    assert EntityExtractor.build_field_query(None, "x") == 'body:"x"'
    assert EntityExtractor.build_field_query("s", "b") == 'subject:"s" AND body:"b"'

def test_fallback_keyword(extractor):
    assert extractor.fallback_keyword("budget spreadsheet") == "budget spreadsheet"
    assert extractor.fallback_keyword("show me all emails") is None
    assert extractor.fallback_keyword("show me 10 emails") is None
    assert extractor.fallback_keyword("hi") is None
    assert extractor.fallback_keyword("invoices, please!") == "invoices"

def test_empty_text(extractor):
    result = extractor.extract("")

    assert result.sender is None
    assert result.keyword is None
    assert not result.is_complex_query

@pytest.mark.parametrize("text,sender", [
    ("emails from john march 5", "john"),
    ("emails from anna lee on friday", "anna lee"),
    ("emails from the design team friday", "design team"),
    ("emails from mike 2 weeks ago", "mike"),
    ("emails from john mayer", "john mayer"),
])
def test_sender_name_stops_at_dates(extractor, text, sender):
    assert extractor.extract_sender(text) == sender

def test_bare_message_is_not_a_body_scope(extractor):
    result = extractor.extract("find the message with the invoice")

    assert not result.is_complex_query
    assert result.keyword == "invoice"

@pytest.mark.parametrize("text", [
    "message body containing refund",
    "message: refund",
    "emails with body containing refund",
])
def test_body_scope_phrasings(extractor, text):
    result = extractor.extract(text)

    assert result.is_complex_query
    assert result.keyword == 'body:"refund"'
