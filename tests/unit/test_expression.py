"""Tests for record field expressions."""

import pytest

from biopipe import OptionError, RecordError
from biopipe.expression import Expression


@pytest.mark.parametrize(
    "text, record, expected",
    [
        (":SEQ_LEN > 30", {"SEQ_LEN": 31}, True),
        (":SEQ_LEN > 30", {"SEQ_LEN": 30}, False),
        (":SEQ_NAME == 'test1'", {"SEQ_NAME": "test1"}, True),
        (':SEQ_NAME != "test1"', {"SEQ_NAME": "test1"}, False),
        (":A + :B >= 10", {"A": 4, "B": 6}, True),
        (":A * 2 - 1 == 7", {"A": 4}, True),
        (":A // 3 == 1 and :A % 3 == 1", {"A": 4}, True),
        (":A / 2 == 2.5", {"A": 5}, True),
        ("0 < :A <= 10", {"A": 10}, True),
        ("0 < :A <= 10", {"A": 11}, False),
        ("not :FLAG", {"FLAG": False}, True),
        (":A > 1 or :B > 1", {"A": 0, "B": 2}, True),
        ("(:A > 1 or :B > 1) and :C == 'x'", {"A": 2, "B": 0, "C": "y"}, False),
        ("-:A == -3", {"A": 3}, True),
        ("True", {}, True),
    ],
)
def test_evaluate(text, record, expected):
    assert Expression(text)(record) is expected


def test_missing_field_is_no_match():
    assert Expression(":SEQ_LEN > 30")({"SEQ": "atcg"}) is False
    assert Expression(":A > 1 or :B > 1")({"B": 5}) is False


def test_none_field_is_no_match():
    assert Expression(":A == 1")({"A": None}) is False


def test_fields():
    assert sorted(Expression(":A > 1 and :B < :C").fields) == ["A", "B", "C"]


def test_colon_inside_string_is_not_a_field():
    assert Expression(":A == 'x:Y'")({"A": "x:Y"}) is True


@pytest.mark.parametrize(
    "text",
    [
        "__import__('os').system('true')",
        ":A.upper() == 'X'",
        "open('/etc/passwd')",
        "[1, 2]",
        "lambda: 1",
        "SEQ_LEN > 1",
        ":A if :B else :C",
        ":A in 'abc'",
    ],
)
def test_rejects_unsupported_constructs(text):
    with pytest.raises(OptionError):
        Expression(text)


def test_rejects_bad_syntax():
    with pytest.raises(OptionError, match="Bad expression"):
        Expression(":A >")


def test_type_error_raises_record_error():
    with pytest.raises(RecordError):
        Expression(":A > 1")({"A": "x"})


def test_division_by_zero_raises_record_error():
    with pytest.raises(RecordError):
        Expression(":A / :B > 1")({"A": 1, "B": 0})


def test_colon_field_syntax_inside_string_is_kept():
    assert Expression(':NAME == "x :Y"')({"NAME": "x :Y"}) is True
    assert Expression(":NAME == 'a :B' and :C > 1")({"NAME": "a :B", "C": 2}) is True
    assert Expression(':NAME == "x :Y"').fields == ["NAME"]


def test_numeric_text_compares_as_number():
    assert Expression(":COUNT > 30")({"COUNT": "40"}) is True
    assert Expression(":COUNT > 30")({"COUNT": "4.5"}) is False
    assert Expression(":COUNT + 1 == 41")({"COUNT": "40"}) is True
