"""Declarative option validation shared by Pipeline and all Commands.

Every check raises ``OptionError`` with a human readable message. Checks
run when a Command is added to a Pipeline so that bad options never reach
the data flow.
"""

from __future__ import annotations

import glob
import operator
import os
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

from .config import load_rc
from .errors import OptionError

Options = Dict[str, Any]

_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    "!=": operator.ne,
}

_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*([eE][+-]?\d+)?|\.\d+([eE][+-]?\d+)?)$")


def _given(value: Any) -> bool:
    """Return True if an option counts as set (None and False do not)."""
    return value is not None and value is not False


def options_allowed(options: Mapping[str, Any], *allowed: str) -> None:
    for option in options:
        if option not in allowed:
            allowed_list = ", ".join(allowed) if allowed else "none"
            raise OptionError(
                f"Disallowed option: {option}. Allowed options: {allowed_list}"
            )


def options_required(options: Mapping[str, Any], *required: str) -> None:
    for option in required:
        if not _given(options.get(option)):
            raise OptionError(
                f"Required option missing: {option}. "
                f"Required options: {', '.join(required)}"
            )


def options_required_unique(options: Mapping[str, Any], *unique: str) -> None:
    """Exactly one of ``unique`` must be set."""
    used = [option for option in unique if _given(options.get(option))]
    if not used:
        raise OptionError(f"Required options missing: {', '.join(unique)}")
    if len(used) > 1:
        raise OptionError(f"Multiple required uniques options used: {', '.join(used)}")


def options_unique(options: Mapping[str, Any], *unique: str) -> None:
    """At most one of ``unique`` may be set."""
    used = [option for option in unique if _given(options.get(option))]
    if len(used) > 1:
        raise OptionError(f"Multiple uniques options used: {', '.join(used)}")


def options_conflict(options: Mapping[str, Any], conflicts: Mapping[str, str]) -> None:
    for option, other in conflicts.items():
        if _given(options.get(option)) and _given(options.get(other)):
            raise OptionError(f"Conflicting options: {option}, {other}")


def options_tie(options: Mapping[str, Any], ties: Mapping[str, str]) -> None:
    """``option`` may only be used together with its tied option."""
    for option, other in ties.items():
        if _given(options.get(option)) and not _given(options.get(other)):
            raise OptionError(f"Tie option: {other} not in options: {option}")


def options_allowed_values(
    options: Mapping[str, Any], allowed: Mapping[str, Sequence[Any]]
) -> None:
    for option, values in allowed.items():
        value = options.get(option)
        if value is None:
            continue
        # Compare with type so that True is not taken for 1
        if not any(type(value) is type(v) and value == v for v in values):
            choices = ", ".join(repr(v) for v in values)
            raise OptionError(
                f"Allowed values for option {option}: {choices} - not {value!r}"
            )


def options_assert(
    options: Mapping[str, Any], option: str, op: str, bound: Any
) -> None:
    """Assert ``options[option] <op> bound`` when the option is set."""
    value = options.get(option)
    if value is None:
        return

    compare = _OPERATORS[op]
    try:
        ok = compare(value, bound)
    except TypeError:
        ok = False

    if not ok:
        raise OptionError(f"Assertion failed: {option} {op} {bound} (got {value!r})")


def options_files_exist(options: Mapping[str, Any], *keys: str) -> None:
    for key in keys:
        if options.get(key) is None:
            continue
        for path in to_list(options[key]):
            if not glob.glob(os.path.expanduser(str(path))):
                raise OptionError(f"No such file: {path}")


def options_files_exist_force(options: Mapping[str, Any], *keys: str) -> None:
    for key in keys:
        if options.get(key) is None:
            continue
        path = os.path.expanduser(str(options[key]))
        if os.path.exists(path) and not options.get("force"):
            raise OptionError(f"File exists: {path} - use 'force: true' to overwrite")


def options_load_rc(options: Options, command: str) -> Options:
    """Merge rc file defaults for ``command`` into options not given."""
    for key, value in load_rc(command).items():
        options.setdefault(key, value)
    return options


def to_list(value: Any) -> List[Any]:
    """Coerce a scalar or list option value to a list."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def to_keys(value: Any) -> List[str]:
    """Coerce a key option to a list of field names.

    Accepts a list, a single name, or a comma separated string. A leading
    colon on a name is dropped, so ":SEQ_NAME, :SEQ" works too.
    """
    if isinstance(value, (list, tuple)):
        names: Iterable[Any] = value
    else:
        names = re.split(r",\s*", str(value))
    return [str(name).strip().lstrip(":") for name in names if str(name).strip()]


def to_number(text: str) -> Any:
    """Return int or float for numeric looking text, else the text."""
    if not _NUMBER.match(text):
        return text
    try:
        return int(text)
    except ValueError:
        return float(text)


__all__ = [
    "Options",
    "options_allowed",
    "options_allowed_values",
    "options_assert",
    "options_conflict",
    "options_files_exist",
    "options_files_exist_force",
    "options_load_rc",
    "options_required",
    "options_required_unique",
    "options_tie",
    "options_unique",
    "to_keys",
    "to_list",
    "to_number",
]
