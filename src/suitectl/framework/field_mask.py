"""
Field-mask payloads for partial updates.

The remote API leaves a field untouched when the request body omits it, and
the wire encoder omits every zero value (``False``, ``""``, ``0``, empty
lists).  To let an operator *clear* a field, each payload carries a
``force_send_fields`` list of wire names that must be emitted even when
zero.  :func:`build_payload` fills a payload from a :class:`Row` and
maintains that list: a flag explicitly set to its kind's zero gets its
wire name force-sent, a flag that was not set is left out entirely.

Nested objects keep their own list::

    class SpreadsheetProperties(Payload):
        title: str | None = None

    class Spreadsheet(Payload):
        properties: SpreadsheetProperties | None = None

    payload = build_payload(Spreadsheet, row, [FieldBinding("title", ("properties", "title"))])
    payload.to_wire()   # {"properties": {"title": ""}} when --title=""
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, get_args

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from suitectl.core.errors import ConfigError
from suitectl.framework.flags import Row, Value, is_zero


class Payload(BaseModel):
    """Request body with a force-send list.

    Field names are snake_case in Python and camelCase on the wire.
    ``force_send_fields`` holds wire names and never appears in the body.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    force_send_fields: list[str] = Field(default_factory=list, exclude=True)

    @classmethod
    def wire_name(cls, attr: str) -> str:
        """Wire (JSON) name of the Python attribute ``attr``."""
        info = cls.model_fields.get(attr)
        if info is None or info.exclude:
            raise ConfigError(f"{cls.__name__} has no field {attr!r}")
        return info.alias or attr

    def force_send(self, wire_name: str) -> None:
        """Emit ``wire_name`` even when its value is zero."""
        declared = {info.alias or name for name, info in type(self).model_fields.items() if not info.exclude}
        if wire_name not in declared:
            raise ConfigError(f"{type(self).__name__} has no field {wire_name!r} to force-send")
        if wire_name not in self.force_send_fields:
            self.force_send_fields.append(wire_name)

    def to_wire(self) -> dict[str, Any]:
        """Encode to a JSON-ready dict, omitting zero values not force-sent."""
        body: dict[str, Any] = {}
        for name, info in type(self).model_fields.items():
            if info.exclude:
                continue
            wire = info.alias or name
            value = getattr(self, name)
            if value is None:
                if wire in self.force_send_fields:
                    body[wire] = None
                continue
            if isinstance(value, Payload):
                body[wire] = value.to_wire()
                continue
            if is_zero(value) and wire not in self.force_send_fields:
                continue
            body[wire] = _encode(value)
        return body


def _encode(value: Any) -> Any:
    if isinstance(value, Payload):
        return value.to_wire()
    if isinstance(value, list | tuple):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        return {key: _encode(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class FieldBinding:
    """Maps one flag onto a (possibly nested) payload attribute.

    Attributes:
        flag: Flag identifier read from the row
        path: Python attribute path inside the payload, e.g. ``("name", "given_name")``
        convert: Optional conversion from the :class:`Value` to the field value
    """

    flag: str
    path: tuple[str, ...]
    convert: Callable[[Value], Any] | None = None

    @classmethod
    def of(cls, flag: str, path: str | None = None, convert: Callable[[Value], Any] | None = None) -> FieldBinding:
        """Shorthand: ``FieldBinding.of("keepForever", "keep_forever")`` or ``of("x", "a.b")``."""
        attrs = tuple((path or flag).split("."))
        return cls(flag, attrs, convert)


def _nested_model(model_cls: type[Payload], attr: str) -> type[Payload]:
    info = model_cls.model_fields.get(attr)
    if info is None:
        raise ConfigError(f"{model_cls.__name__} has no field {attr!r}")
    for candidate in (info.annotation, *get_args(info.annotation)):
        if isinstance(candidate, type) and issubclass(candidate, Payload):
            return candidate
    raise ConfigError(f"{model_cls.__name__}.{attr} is not a nested payload")


def build_payload(
    model_cls: type[Payload],
    row: Row,
    bindings: Iterable[FieldBinding],
    *,
    base: Payload | None = None,
) -> Payload:
    """Fold ``bindings`` over ``row`` into a payload.

    Only flags present in the row contribute.  Parent objects along a
    nested path are created on first use, and a zero value is force-sent
    on the object that owns the field.
    """
    payload = base if base is not None else model_cls()
    for binding in bindings:
        value = row.get(binding.flag)
        if value is None or not value.is_set:
            continue
        converted = binding.convert(value) if binding.convert else value.value

        target: Payload = payload
        for attr in binding.path[:-1]:
            child = getattr(target, attr)
            if child is None:
                child = _nested_model(type(target), attr)()
                setattr(target, attr, child)
            target = child

        leaf = binding.path[-1]
        wire = type(target).wire_name(leaf)
        setattr(target, leaf, converted)
        if is_zero(converted):
            target.force_send(wire)
    return payload


__all__ = ["FieldBinding", "Payload", "build_payload"]
