"""Grab records in the stream.

``grab`` selects records by matching patterns against keys or values. It is
the record stream equivalent of ``grep``.

Usage::

    grab(<select=<pattern>|select_file=<file>|reject=<pattern>|
          reject_file=<file>|evaluate=<expression>>
         [, exact=<bool>, keys=<list>|keys_only=<bool>|values_only=<bool>,
          ignore_case=<bool>])

Options:
    select:      Pattern or list of patterns; select matching records.
    select_file: File with one pattern per line to select.
    reject:      Pattern or list of patterns; reject matching records.
    reject_file: File with one pattern per line to reject.
    evaluate:    Expression over fields; select records where it is true.
    exact:       Match whole keys/values from a lookup set instead of regex.
    keys:        Key or list of keys whose values to match.
    keys_only:   Only match keys.
    values_only: Only match values.
    ignore_case: Case insensitive regex matching.

Examples:
    Records mentioning "human" in any key or value::

        grab(select="human")

    Sequences starting with ATCG, or records without "SEQ" keys::

        grab(select="^ATCG", keys="SEQ")
        grab(reject="SEQ", keys_only=True)

    Records with a sequence longer than 30::

        grab(evaluate=":SEQ_LEN > 30")

    IDs from a file, matched exactly against the ID field::

        grab(select_file="ids.txt", keys="ID", exact=True)

If chaining several grabs, put the most restrictive first.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from ..expression import Expression
from ..options import (
    options_allowed,
    options_conflict,
    options_files_exist,
    options_required_unique,
    options_unique,
    to_keys,
    to_list,
    to_number,
)
from ..status import Status, status_init

Record = Dict[str, Any]


def _exact_value(value: Any) -> Any:
    # numbers compare as numbers, everything else as its string form
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return str(value)


class Grab:
    """Select or reject records by pattern or expression."""

    STATS = ("records_in", "records_out")

    def __init__(self, options: Dict[str, Any]):
        self.options = options
        self.check_options()

        self.keys_only = bool(options.get("keys_only"))
        self.values_only = bool(options.get("values_only"))
        self.invert = bool(options.get("reject") is not None or options.get("reject_file"))
        self.keys = to_keys(options["keys"]) if options.get("keys") is not None else None

        self.patterns = self._compile_patterns()
        self.exact: Optional[Set[Any]] = None
        self.regexes: Optional[List[re.Pattern]] = None
        self.expression: Optional[Expression] = None

        if options.get("evaluate") is not None:
            self.expression = Expression(options["evaluate"])
        elif options.get("exact"):
            self.exact = self._compile_exact()
        else:
            self.regexes = self._compile_regexes()

    def check_options(self) -> None:
        options = self.options
        options_allowed(options, "select", "select_file", "reject", "reject_file",
                        "evaluate", "exact", "keys", "keys_only", "values_only",
                        "ignore_case")
        options_required_unique(options, "select", "select_file", "reject",
                                "reject_file", "evaluate")
        options_conflict(options, {"keys": "evaluate", "keys_only": "evaluate",
                                   "values_only": "evaluate", "ignore_case": "evaluate",
                                   "exact": "evaluate"})
        options_unique(options, "keys_only", "values_only")
        options_files_exist(options, "select_file", "reject_file")

    def lmb(self, input: Iterable[Record], status: Status) -> Iterator[Record]:
        status_init(status, self.STATS)

        for record in input:
            status["records_in"] += 1

            if self.exact is not None:
                match = self.exact_match(record)
            elif self.regexes is not None:
                match = self.regex_match(record)
            else:
                match = self.expression(record)

            if match != self.invert:
                status["records_out"] += 1
                yield record

    def _compile_patterns(self) -> List[Any]:
        options = self.options
        for key in ("select", "reject"):
            if options.get(key) is not None:
                return to_list(options[key])
        for key in ("select_file", "reject_file"):
            if options.get(key):
                return self._load_patterns(options[key])
        return []

    @staticmethod
    def _load_patterns(path: str) -> List[Any]:
        patterns = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\r\n")
                if line:
                    patterns.append(to_number(line))
        return patterns

    def _compile_exact(self) -> Set[Any]:
        return {_exact_value(p) for p in self.patterns}

    def _compile_regexes(self) -> List[re.Pattern]:
        flags = re.IGNORECASE if self.options.get("ignore_case") else 0
        return [re.compile(str(pattern), flags) for pattern in self.patterns]

    def _targets(self, record: Record) -> Iterable[str]:
        return self.keys if self.keys is not None else record.keys()

    def exact_match(self, record: Record) -> bool:
        for key in self._targets(record):
            if not self.values_only and key in self.exact:
                return True
            if self.keys_only:
                continue
            value = record.get(key)
            if value is None:
                continue
            if _exact_value(value) in self.exact:
                return True
        return False

    def regex_match(self, record: Record) -> bool:
        for key in self._targets(record):
            if not self.values_only and any(r.search(key) for r in self.regexes):
                return True
            if self.keys_only:
                continue
            value = record.get(key)
            if value is None:
                continue
            text = str(value)
            if any(r.search(text) for r in self.regexes):
                return True
        return False


__all__ = ["Grab"]
