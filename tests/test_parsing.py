import pytest

from askdata.utils.parsing import (
    extract_json_text,
    parse_choice_index,
    parse_fallback_pick,
    parse_intent,
    parse_json_object,
)


def test_json_text_strips_fences_and_trailing_noise():
    raw = '```json\n{"limit": 5}\n```'
    assert extract_json_text(raw) == '{"limit": 5}'
    assert extract_json_text('```\n[1, 2]\n```') == "[1, 2]"
    assert parse_json_object('Sure! {"country": "USA"} hope that helps').value == {"country": "USA"}


@pytest.mark.parametrize(
    "reply,expected",
    [("data", "data"), ("DATA.", "data"), ("Conversational", "conversational"), ('"conversational"', "conversational")],
)
def test_parse_intent(reply, expected):
    assert parse_intent(reply).value == expected


def test_parse_intent_unrecognised_is_failure():
    result = parse_intent("maybe?")
    assert not result.ok
    assert result.unwrap_or("data") == "data"
    assert not parse_intent("").ok


def test_parse_choice_index():
    assert parse_choice_index("2", 3).value == 1
    assert parse_choice_index("Option 3.", 3).value == 2
    assert not parse_choice_index("none", 3).ok
    assert not parse_choice_index("7", 3).ok
    assert not parse_choice_index("0", 3).ok
    assert not parse_choice_index("the first one", 3).ok


def test_parse_json_object_rejects_non_objects():
    assert parse_json_object('{"a": 1}').value == {"a": 1}
    assert not parse_json_object("[1, 2]").ok
    assert not parse_json_object("not json").ok


def test_parse_fallback_pick():
    pick = parse_fallback_pick('{"functionName": "getAllAdmins", "confidence": 0.9, "reasoning": "admins"}').value
    assert pick.function_name == "getAllAdmins"
    assert pick.confidence == pytest.approx(0.9)
    assert pick.reasoning == "admins"

    none_pick = parse_fallback_pick('{"functionName": null}').value
    assert none_pick.function_name is None
    assert none_pick.confidence == 0.0

    assert not parse_fallback_pick('{"functionName": 3}').ok
    assert not parse_fallback_pick('{"functionName": "x", "confidence": "high"}').ok
    assert not parse_fallback_pick("garbage").ok
