"""Tests for the disk backed sort command."""

import random

import pytest

from biopipe import BP, OptionError, RecordError
from biopipe.commands.sort import Sort

RECORDS = [
    {"NAME": "test2", "COUNT": 4},
    {"NAME": "test1", "COUNT": 21},
    {"NAME": "test2", "COUNT": 2},
    {"NAME": "test3", "COUNT": 9},
]


def test_sort_ascending(collect):
    records = collect(BP().sort(key="COUNT"), input=RECORDS)
    assert [r["COUNT"] for r in records] == [2, 4, 9, 21]


def test_sort_reverse(collect):
    records = collect(BP().sort(key="COUNT", reverse=True), input=RECORDS)
    assert [r["COUNT"] for r in records] == [21, 9, 4, 2]


def test_sort_strings(collect):
    records = collect(BP().sort(key="NAME"), input=RECORDS)
    assert [r["NAME"] for r in records] == ["test1", "test2", "test2", "test3"]


def test_sort_key_with_colon(collect):
    records = collect(BP().sort(key=":COUNT"), input=RECORDS)
    assert [r["COUNT"] for r in records] == [2, 4, 9, 21]


def test_sort_keeps_records_whole(collect):
    records = collect(BP().sort(key="COUNT"), input=RECORDS)
    assert records[0] == {"NAME": "test2", "COUNT": 2}
    assert records[-1] == {"NAME": "test1", "COUNT": 21}


@pytest.mark.parametrize("reverse", [False, True])
def test_small_blocks_match_single_block(collect, reverse):
    """Spilling many blocks gives the same result as one block."""
    rng = random.Random(42)
    values = rng.sample(range(10000), 1000)
    input = [{"ID": f"id{v}", "VALUE": v} for v in values]

    single = collect(BP().sort(key="VALUE", reverse=reverse), input=input)
    multi = collect(BP().sort(key="VALUE", reverse=reverse, block_size=500), input=input)

    assert multi == single
    assert [r["VALUE"] for r in single] == sorted(values, reverse=reverse)


def test_small_blocks_spill(collect):
    p = BP().sort(key="VALUE", block_size=1)
    records = collect(p, input=[{"VALUE": v} for v in (3, 1, 2)])

    assert [r["VALUE"] for r in records] == [1, 2, 3]
    assert p.status[0]["records_in"] == 3
    assert p.status[0]["records_out"] == 3


def test_mixed_int_and_float(collect):
    records = collect(BP().sort(key="V", block_size=10), input=[{"V": 2.5}, {"V": 1}, {"V": 3}])
    assert [r["V"] for r in records] == [1, 2.5, 3]


def test_empty_input(collect):
    assert collect(BP().sort(key="COUNT"), input=[]) == []


@pytest.fixture
def saved_blocks(monkeypatch):
    """Record the size of every block written to a spill file."""
    sizes = []
    save_block = Sort.save_block

    def spy(self, block, tmp_dir, index):
        sizes.append(len(block))
        return save_block(self, block, tmp_dir, index)

    monkeypatch.setattr(Sort, "save_block", spy)
    return sizes


def test_no_spill_file_for_empty_block(collect, saved_blocks):
    assert collect(BP().sort(key="COUNT"), input=[]) == []
    assert saved_blocks == []

    records = collect(BP().sort(key="COUNT", block_size=1), input=RECORDS)
    assert [r["COUNT"] for r in records] == [2, 4, 9, 21]
    assert saved_blocks == [1, 1, 1, 1]


def test_spill_files_removed(collect, tmp_path, monkeypatch):
    tmp = tmp_path / "spill"
    tmp.mkdir()
    monkeypatch.setenv("BIOPIPE_TMPDIR", str(tmp))

    collect(BP().sort(key="COUNT", block_size=1), input=RECORDS)
    assert list(tmp.iterdir()) == []


def test_spill_files_removed_on_error(tmp_path, monkeypatch):
    tmp = tmp_path / "spill"
    tmp.mkdir()
    monkeypatch.setenv("BIOPIPE_TMPDIR", str(tmp))

    with pytest.raises(RecordError):
        BP().sort(key="COUNT", block_size=1).run(input=RECORDS + [{"NAME": "x"}])
    assert list(tmp.iterdir()) == []


def test_missing_key_raises():
    with pytest.raises(RecordError, match="Sort key COUNT missing"):
        BP().sort(key="COUNT").run(input=[{"COUNT": 1}, {"NAME": "x"}])


def test_mixed_types_raise():
    with pytest.raises(RecordError, match="Mixed value types"):
        BP().sort(key="COUNT").run(input=[{"COUNT": 1}, {"COUNT": "x"}])


@pytest.mark.parametrize(
    "options",
    [
        {},
        {"key": "A", "foo": 1},
        {"key": "A", "block_size": 0},
        {"key": "A", "reverse": "yes"},
    ],
)
def test_bad_options(options):
    with pytest.raises(OptionError):
        BP().sort(**options)
