"""Tests for suitectl.framework.field_mask — force-send payload encoding."""

from __future__ import annotations

import pytest

from suitectl.api.models import Revision, Spreadsheet, User
from suitectl.core.errors import ConfigError
from suitectl.framework.field_mask import FieldBinding, Payload, build_payload
from suitectl.framework.flags import Flag, FlagKind, Row, Value

REVISION_BINDINGS = [
    FieldBinding.of("published"),
    FieldBinding.of("keepForever", "keep_forever"),
]


def _row(**cells: tuple[FlagKind, str]) -> Row:
    return Row({name: Flag(name, kind).parse(text) for name, (kind, text) in cells.items()})


class TestPayload:
    def test_zero_values_are_omitted(self):
        assert Revision(published=False, keep_forever=True).to_wire() == {"keepForever": True}

    def test_force_sent_zero_is_emitted(self):
        revision = Revision(published=False)
        revision.force_send("published")
        assert revision.to_wire() == {"published": False}

    def test_force_send_fields_never_on_the_wire(self):
        revision = Revision(published=False)
        revision.force_send("published")
        assert "forceSendFields" not in revision.to_wire()
        assert "force_send_fields" not in revision.to_wire()

    def test_force_send_unknown_field(self):
        with pytest.raises(ConfigError):
            Revision().force_send("owner")

    def test_force_send_is_idempotent(self):
        revision = Revision()
        revision.force_send("published")
        revision.force_send("published")
        assert revision.force_send_fields == ["published"]

    def test_wire_name(self):
        assert Revision.wire_name("keep_forever") == "keepForever"

    def test_custom_payload(self):
        class Thing(Payload):
            display_name: str | None = None
            count: int | None = None

        thing = Thing(display_name="", count=0)
        thing.force_send("count")
        assert thing.to_wire() == {"count": 0}


class TestBuildPayload:
    def test_explicit_false_is_force_sent(self):
        payload = build_payload(Revision, _row(published=(FlagKind.BOOL, "false")), REVISION_BINDINGS)
        assert payload.force_send_fields == ["published"]
        assert payload.to_wire() == {"published": False}

    def test_non_zero_needs_no_force_send(self):
        payload = build_payload(Revision, _row(published=(FlagKind.BOOL, "true")), REVISION_BINDINGS)
        assert payload.force_send_fields == []
        assert payload.to_wire() == {"published": True}

    def test_unset_flag_contributes_nothing(self):
        payload = build_payload(Revision, _row(published=(FlagKind.BOOL, "")), REVISION_BINDINGS)
        assert payload.to_wire() == {}

    def test_missing_flag_contributes_nothing(self):
        assert build_payload(Revision, Row(), REVISION_BINDINGS).to_wire() == {}

    def test_nested_path_creates_parent(self):
        bindings = [FieldBinding.of("givenName", "name.given_name")]
        user = build_payload(User, _row(givenName=(FlagKind.STRING, "Ada")), bindings)
        assert user.to_wire() == {"name": {"givenName": "Ada"}}

    def test_nested_zero_is_force_sent_on_owner(self):
        # an explicit empty string from the command line
        row = Row({"title": Value("title", FlagKind.STRING, is_set=True, raw="", value="")})
        payload = build_payload(Spreadsheet, row, [FieldBinding.of("title", "properties.title")])
        assert payload.force_send_fields == []
        assert payload.properties.force_send_fields == ["title"]
        assert payload.to_wire() == {"properties": {"title": ""}}

    def test_convert(self):
        bindings = [FieldBinding.of("published", convert=lambda value: not value.get_bool())]
        payload = build_payload(Revision, _row(published=(FlagKind.BOOL, "true")), bindings)
        assert payload.to_wire() == {"published": False}
        assert payload.force_send_fields == ["published"]

    def test_path_through_non_payload_field(self):
        with pytest.raises(ConfigError):
            build_payload(User, _row(x=(FlagKind.STRING, "v")), [FieldBinding.of("x", "password.inner")])
