"""Declarative flag schemas for verbs.

Manifesto:
    Every verb validates its inputs against one flag table.  The same
    table drives the command line (``--fileId F1``), CSV columns for
    batch verbs, per-verb defaults and required checks, so a resource is
    described once and every entry point agrees on it.

A :class:`Flag` describes one parameter; a :class:`Value` is the runtime
binding of a flag to what the user supplied; a :class:`Row` maps flag
identifiers to values and is the unit of work handed to a remote call.

Example::

    table = FlagTable([
        Flag("fileId", FlagKind.STRING, available_for={"delete", "get"},
             required_for={"delete", "get"}),
        Flag("published", FlagKind.BOOL, available_for={"update"}),
    ])
    table.batch_columns("delete")   # ["fileId"]
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from suitectl.core.errors import ConfigError, KindMismatchError, UnknownFlagError

LIST_SEPARATOR = ";"

_TRUE = {"1", "t", "true", "y", "yes"}
_FALSE = {"0", "f", "false", "n", "no"}


class FlagKind(str, Enum):
    """Scalar kind of a flag."""

    STRING = "string"
    BOOL = "bool"
    STRING_LIST = "stringList"
    INT = "int"

    @property
    def zero(self) -> Any:
        """The kind's zero value."""
        if self is FlagKind.BOOL:
            return False
        if self is FlagKind.STRING_LIST:
            return []
        if self is FlagKind.INT:
            return 0
        return ""


def is_zero(value: Any) -> bool:
    """True for ``None``, ``""``, ``False``, ``0`` and empty containers."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, int | float) and not isinstance(value, bool):
        return value == 0
    if isinstance(value, list | tuple | dict | set):
        return len(value) == 0
    return False


def parse_bool(text: str, flag: str = "") -> bool:
    """Parse a boolean cell or flag value (``true``/``false``/``1``/``0`` ...)."""
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise KindMismatchError(flag, FlagKind.BOOL.value, f"Flag {flag} expects a bool value, got {text!r}")


def parse_key_values(text: str) -> dict[str, str]:
    """Parse ``key=value;key=value`` into a dict.  Items without ``=`` are ignored."""
    result: dict[str, str] = {}
    for part in text.split(LIST_SEPARATOR):
        key, sep, value = part.partition("=")
        if sep:
            result[key.strip()] = value
    return result


@dataclass(frozen=True)
class Flag:
    """Definition of one verb parameter.

    Attributes:
        name: Identifier, used verbatim as ``--<name>`` and as CSV column name
        kind: Scalar kind of the value
        description: Help text
        available_for: Verbs that accept the flag
        required_for: Verbs that require the flag (subset of ``available_for``)
        defaults: Per-verb default values
        exclude_from_batch_all: Never accepted as a CSV column
        recursive: Verbs whose ``batch`` subaction also accepts the flag on the
            command line, as a value shared by every row
        key_value: Each list item is parsed as ``key=value;key=value``
    """

    name: str
    kind: FlagKind = FlagKind.STRING
    description: str = ""
    available_for: frozenset[str] = field(default_factory=frozenset)
    required_for: frozenset[str] = field(default_factory=frozenset)
    defaults: Mapping[str, Any] = field(default_factory=dict)
    exclude_from_batch_all: bool = False
    recursive: frozenset[str] = field(default_factory=frozenset)
    key_value: bool = False

    def __post_init__(self) -> None:
        for attr in ("available_for", "required_for", "recursive"):
            value = getattr(self, attr)
            if not isinstance(value, frozenset):
                object.__setattr__(self, attr, frozenset(value))
        if not self.required_for <= self.available_for:
            extra = ", ".join(sorted(self.required_for - self.available_for))
            raise ConfigError(f"Flag {self.name} is required for verbs it is not available for: {extra}")
        if not set(self.defaults) <= self.available_for:
            extra = ", ".join(sorted(set(self.defaults) - self.available_for))
            raise ConfigError(f"Flag {self.name} has defaults for verbs it is not available for: {extra}")
        if self.key_value and self.kind is not FlagKind.STRING_LIST:
            raise ConfigError(f"Flag {self.name}: key_value requires a string-list flag")

    def available(self, verb: str) -> bool:
        return verb in self.available_for

    def required(self, verb: str) -> bool:
        return verb in self.required_for

    def default_value(self, verb: str) -> Value:
        """The value this flag takes for ``verb`` when the user supplied nothing."""
        if verb in self.defaults:
            default = self.defaults[verb]
            return Value(self.name, self.kind, is_set=not is_zero(default), value=default)
        return Value.unset(self.name, self.kind)

    def parse(self, text: str) -> Value:
        """Parse textual input (a CSV cell or a flag argument) per this flag's kind.

        Empty text yields an unset value.
        """
        if text == "":
            return Value.unset(self.name, self.kind)
        if self.kind is FlagKind.BOOL:
            return Value(self.name, self.kind, is_set=True, raw=text, value=parse_bool(text, self.name))
        if self.kind is FlagKind.INT:
            try:
                number = int(text.strip())
            except ValueError:
                raise KindMismatchError(
                    self.name, self.kind.value, f"Flag {self.name} expects an int value, got {text!r}"
                ) from None
            return Value(self.name, self.kind, is_set=True, raw=text, value=number)
        if self.kind is FlagKind.STRING_LIST:
            items = [item for item in text.split(LIST_SEPARATOR) if item != ""]
            return Value(self.name, self.kind, is_set=True, raw=text, value=items)
        return Value(self.name, self.kind, is_set=True, raw=text, value=text)


@dataclass(frozen=True)
class Value:
    """Runtime binding of a flag to a parsed value.

    When ``is_set`` is false every getter returns its kind's zero value.
    When it is true, calling a getter for a different kind raises
    :class:`KindMismatchError`.
    """

    flag: str
    kind: FlagKind
    is_set: bool = False
    raw: str | None = None
    value: Any = None

    @classmethod
    def unset(cls, flag: str, kind: FlagKind) -> Value:
        return cls(flag, kind)

    def _expect(self, kind: FlagKind) -> Any:
        if not self.is_set:
            return kind.zero
        if self.kind is not kind:
            raise KindMismatchError(
                self.flag, kind.value, f"Flag {self.flag} is a {self.kind.value} flag, not {kind.value}"
            )
        return self.value

    def get_string(self) -> str:
        return self._expect(FlagKind.STRING)

    def get_bool(self) -> bool:
        return self._expect(FlagKind.BOOL)

    def get_list(self) -> list[str]:
        return list(self._expect(FlagKind.STRING_LIST))

    def get_int(self) -> int:
        return self._expect(FlagKind.INT)

    def get_maps(self) -> list[dict[str, str]]:
        """Items of a key=value string-list flag, each parsed into a dict."""
        return [parse_key_values(item) for item in self.get_list()]

    @property
    def is_zero(self) -> bool:
        return is_zero(self.value)


class Row(dict):
    """Mapping from flag identifier to :class:`Value` for one unit of work.

    Looking up an identifier the row does not carry raises
    :class:`UnknownFlagError`.
    """

    def __init__(self, values: Mapping[str, Value] | None = None, *, line: int | None = None):
        super().__init__(values or {})
        self.line = line

    def __missing__(self, key: str) -> Value:
        raise UnknownFlagError(key)

    def strings(self, *names: str) -> list[str]:
        """String projections of several flags, in order."""
        return [self[name].get_string() for name in names]


class FlagTable:
    """Flag schema of one resource, shared by all of its verbs."""

    def __init__(self, flags: Iterable[Flag]):
        self._flags: dict[str, Flag] = {}
        for flag in flags:
            if flag.name in self._flags:
                raise ConfigError(f"Duplicate flag: {flag.name}")
            self._flags[flag.name] = flag

    def __getitem__(self, name: str) -> Flag:
        try:
            return self._flags[name]
        except KeyError:
            raise UnknownFlagError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._flags

    def __iter__(self) -> Iterator[Flag]:
        return iter(self._flags.values())

    def __len__(self) -> int:
        return len(self._flags)

    @property
    def verbs(self) -> set[str]:
        return {verb for flag in self for verb in flag.available_for}

    def for_verb(self, verb: str) -> list[Flag]:
        """Flags visible to ``verb``, in declaration order."""
        return [flag for flag in self if flag.available(verb)]

    def required_for(self, verb: str) -> list[str]:
        return [flag.name for flag in self if flag.required(verb)]

    def batch_columns(self, verb: str) -> list[str]:
        """Flag identifiers acceptable as CSV columns for ``verb``, in declaration order."""
        return [flag.name for flag in self.for_verb(verb) if not flag.exclude_from_batch_all]

    def recursive_for(self, verb: str) -> list[Flag]:
        """Flags the ``batch`` subaction of ``verb`` accepts on the command line."""
        return [flag for flag in self.for_verb(verb) if verb in flag.recursive]
