"""Tests for the grab filter."""

import pytest

from biopipe import BP, OptionError, RecordError

SEQS = [
    {"SEQ_NAME": "test1", "SEQ": "atcg", "SEQ_LEN": 4},
    {"SEQ_NAME": "test2", "SEQ": "DSEQM", "SEQ_LEN": 5},
    {"FOO": "SEQ"},
]


def grab(collect, records, **options):
    return collect(BP().grab(**options), input=records)


def test_select_list(collect):
    assert grab(collect, SEQS, select=["est1", "QM"]) == SEQS[:2]


def test_select_matches_keys_and_values(collect):
    assert grab(collect, SEQS, select="FOO") == [SEQS[2]]
    assert grab(collect, SEQS, select="DSEQ") == [SEQS[1]]


def test_select_anchored(collect):
    assert grab(collect, SEQS, select="^atcg$") == [SEQS[0]]


def test_select_number(collect):
    """Numbers are matched against the string form of values."""
    assert grab(collect, SEQS, select=5) == [SEQS[1]]


def test_reject(collect):
    assert grab(collect, SEQS, reject=["est1", "QM"]) == [SEQS[2]]


@pytest.mark.parametrize("pattern", ["est", "SEQ", "atcg", "^test2$", "xyz", "LEN"])
def test_select_and_reject_partition(collect, pattern):
    selected = grab(collect, SEQS, select=pattern)
    rejected = grab(collect, SEQS, reject=pattern)

    assert len(selected) + len(rejected) == len(SEQS)
    assert all(record not in rejected for record in selected)


def test_exact_versus_regex(collect):
    records = [{"SEQ": "atcg"}, {"SEQ": "ATCGX"}]

    assert grab(collect, records, select="atcg", exact=True) == [records[0]]
    assert grab(collect, records, select="atcg", ignore_case=True) == records
    assert grab(collect, records, select="atcg") == [records[0]]


def test_exact_numbers(collect):
    records = [{"COUNT": 2}, {"COUNT": 20}, {"COUNT": "2"}]
    assert grab(collect, records, select=2, exact=True, keys="COUNT") == [records[0]]
    assert grab(collect, records, select="2", exact=True, keys="COUNT") == [records[2]]


def test_exact_keys(collect):
    assert grab(collect, SEQS, select="FOO", exact=True) == [SEQS[2]]
    assert grab(collect, SEQS, select="FO", exact=True) == []


def test_keys_limits_matching(collect):
    assert grab(collect, SEQS, select="test", keys="SEQ") == []
    assert grab(collect, SEQS, select="test", keys="SEQ_NAME") == SEQS[:2]
    assert grab(collect, SEQS, select="test", keys=":SEQ, :SEQ_NAME") == SEQS[:2]


def test_keys_only(collect):
    assert grab(collect, SEQS, select="SEQ", keys_only=True) == SEQS[:2]
    assert grab(collect, SEQS, reject="SEQ", keys_only=True) == [SEQS[2]]


def test_values_only(collect):
    assert grab(collect, SEQS, select="SEQ", values_only=True) == [SEQS[1], SEQS[2]]
    assert grab(collect, SEQS, select="FOO", values_only=True) == []


def test_ignore_case(collect):
    assert grab(collect, SEQS, select="ATCG", ignore_case=True) == [SEQS[0]]
    assert grab(collect, SEQS, select="ATCG") == []


def test_none_value_does_not_match(collect):
    records = [{"A": None}, {"A": 0}]
    assert grab(collect, records, select="None", values_only=True) == []
    assert grab(collect, records, select="0", values_only=True) == [records[1]]


def test_select_file(collect, tmp_path):
    path = tmp_path / "patterns.txt"
    path.write_text("test1\n\nDSEQM\n")

    assert grab(collect, SEQS, select_file=str(path), exact=True) == SEQS[:2]
    assert grab(collect, SEQS, reject_file=str(path), exact=True) == [SEQS[2]]


def test_select_file_numbers(collect, tmp_path):
    path = tmp_path / "ids.txt"
    path.write_text("4\n5\n")
    assert grab(collect, SEQS, select_file=str(path), exact=True, keys="SEQ_LEN") == SEQS[:2]


def test_select_file_missing(tmp_path):
    with pytest.raises(OptionError, match="No such file"):
        BP().grab(select_file=str(tmp_path / "nope.txt"))


def test_evaluate(collect):
    assert grab(collect, SEQS, evaluate=":SEQ_LEN > 4") == [SEQS[1]]
    assert grab(collect, SEQS, evaluate=":SEQ_LEN > 3 and :SEQ_NAME != 'test2'") == [SEQS[0]]


def test_evaluate_absent_field_is_no_match(collect):
    """A record lacking any referenced field is not selected."""
    assert grab(collect, SEQS, evaluate=":SEQ_NAME == 'test1' or :FOO == 'SEQ'") == [SEQS[0]]


def test_evaluate_type_error():
    with pytest.raises(RecordError):
        BP().grab(evaluate=":SEQ_NAME > 4").run(input=SEQS)


def test_status(collect):
    p = BP().grab(select="test")
    collect(p, input=SEQS)
    assert p.status[0]["records_in"] == 3
    assert p.status[0]["records_out"] == 2


@pytest.mark.parametrize(
    "options, message",
    [
        ({}, "Required options missing"),
        ({"select": "a", "reject": "b"}, "Multiple required uniques"),
        ({"evaluate": ":A > 1", "keys": "A"}, "Conflicting options"),
        ({"evaluate": ":A > 1", "ignore_case": True}, "Conflicting options"),
        ({"select": "a", "keys_only": True, "values_only": True}, "Multiple uniques"),
        ({"select": "a", "foo": True}, "Disallowed option"),
        ({"evaluate": "import os"}, "Bad expression"),
    ],
)
def test_bad_options(options, message):
    with pytest.raises(OptionError, match=message):
        BP().grab(**options)


def test_evaluate_numeric_text_and_quoted_colon(collect):
    records = [{"NAME": "x :Y", "COUNT": "40"}, {"NAME": "x", "COUNT": "20"}]
    assert collect(BP().grab(evaluate=":COUNT > 30"), input=records) == records[:1]
    assert collect(BP().grab(evaluate=':NAME == "x :Y"'), input=records) == records[:1]
