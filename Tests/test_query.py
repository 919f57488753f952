"""Test query-string decoding."""

from mailgate.query import parse_query


def test_decodes_percent_encoded_values():
    params = parse_query("action=add&emailAddr=jane%40example.com&listName=public-announce")

    assert params == {"action": "add", "emailAddr": "jane@example.com", "listName": "public-announce"}


def test_key_without_value_is_true():
    assert parse_query("verbose&action=subscribe") == {"verbose": True, "action": "subscribe"}
    assert parse_query("action=") == {"action": True}


def test_leading_question_mark_and_empty_items_ignored():
    assert parse_query("?&action=add&&") == {"action": "add"}
    assert parse_query("") == {}


def test_plus_is_kept_literally():
    assert parse_query("emailAddr=jane+news@example.com") == {"emailAddr": "jane+news@example.com"}


def test_value_keeps_text_after_first_equals():
    assert parse_query("error=a%3Db") == {"error": "a=b"}


def test_last_duplicate_wins():
    assert parse_query("action=add&action=subscribe") == {"action": "subscribe"}
