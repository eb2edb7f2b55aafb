import re

import pytest

from schemadb.db.query import DuplicateSchemaError, SchemaError
from schemadb.db.schema import Equality, Schema
from schemadb.db.types import FieldType


@pytest.mark.parametrize("fields", [
    {"x": dict},
    {"x": "blob"},
    {"x": {"type": "blob"}},
    {"x": {"required": True}},
    {"x": {"type": "text", "colour": "red"}},
    {"x": {"type": "number", "min": "3"}},
    {"x": {"type": "text", "match": "("}},
    {"x": 42},
])
def test_malformed_fields_raise_schema_error(fields):
    with pytest.raises(SchemaError):
        Schema(fields)


def test_schema_without_fields_is_rejected():
    with pytest.raises(SchemaError):
        Schema({})
    with pytest.raises(SchemaError):
        Schema(None)


def test_default_options_inject_id_and_timestamps():
    s = Schema({"name": str})
    assert list(s) == ["id", "name", "created", "modified", "deleted"]
    assert s["id"].type is FieldType.TEXT
    assert s["created"].type is FieldType.TEMPORAL and s["created"].required
    assert s["deleted"].default is None
    assert s.soft_delete
    assert s.equality is Equality.DEFAULT


def test_options_can_switch_off_uuid_and_timestamps():
    s = Schema({"name": str}, {"uuid": False, "timestamps": False})
    assert list(s) == ["name"]
    assert not s.soft_delete
    assert s.created_field is None


def test_partial_timestamps_without_deleted_disable_soft_delete():
    s = Schema({"name": str}, {"timestamps": {"deleted": None}})
    assert "created" in s and "modified" in s
    assert "deleted" not in s
    assert not s.soft_delete


def test_renamed_timestamps():
    s = Schema({"name": str}, {"timestamps": {"created": "born_at", "deleted": "gone_at"}})
    assert s.created_field == "born_at"
    assert s.deleted_field == "gone_at"
    assert "born_at" in s and "gone_at" in s


@pytest.mark.parametrize("options", [
    {"colour": "red"},
    {"equality": "fuzzy"},
    {"timestamps": {"touched": "t"}},
    {"timestamps": "yes"},
    {"type_defs": {"blob": 1}},
])
def test_bad_options_raise_schema_error(options):
    with pytest.raises(SchemaError):
        Schema({"name": str}, options)


def test_equality_option_accepts_name_or_enum():
    assert Schema({"n": int}, {"equality": "strict"}).equality is Equality.STRICT
    assert Schema({"n": int}, {"equality": Equality.STRICT}).equality is Equality.STRICT


def test_field_declaration_attributes():
    s = Schema({
        "code": {"type": "text", "required": True, "min": 2, "max": 4,
                 "match": (r"^[A-Z]+$", "upper case only"), "unique": True},
    })
    fdef = s["code"]
    assert fdef.required and fdef.unique
    assert fdef.min == 2 and fdef.max == 4
    assert isinstance(fdef.match[0], re.Pattern)
    assert fdef.match[1] == "upper case only"
    assert fdef.constraints() == ["type", "required", "min", "max", "match", "unique"]


def test_virtuals_are_not_fields():
    s = Schema({"name": str, "shout": lambda self: self["name"].upper()})
    assert "shout" in s.virtuals
    assert "shout" not in s


def test_lifecycles_from_fields_argument_and_hook():
    before = lambda candidate: None
    s = Schema({"name": str, "before_create": before}, lifecycles={"after_destroy": print})
    assert s.lifecycles["before_create"] is before
    assert s.lifecycles["after_destroy"] is print
    assert "before_create" not in s

    after = lambda instance: None
    s.hook("after_update", after)
    assert s.lifecycles["after_update"] is after
    with pytest.raises(SchemaError):
        s.hook("before_lunch", after)


def test_validate_checks_declaration_type():
    s = Schema({"name": str})
    assert s.validate({"type": "list"}) is FieldType.LIST
    with pytest.raises(SchemaError):
        s.validate({"type": "blob"})
    with pytest.raises(SchemaError):
        s.validate({})


def test_defaults_prefer_field_default_over_type_defs():
    s = Schema({
        "n": int,
        "m": {"type": int, "default": 3},
        "tags": {"type": list, "default": ["x"]},
        "stamp": {"type": str, "default": lambda: "generated"},
    }, {"type_defs": {"number": 7}})
    assert s.default_for("n") == 7
    assert s.default_for("m") == 3
    assert s.default_for("stamp") == "generated"
    tags = s.default_for("tags")
    tags.append("y")
    assert s.default_for("tags") == ["x"]


def test_strip_unknown_honours_force():
    forced = Schema({"name": str})
    assert forced.strip_unknown({"name": "a", "bogus": 1, "id": "x"}) == {"name": "a", "id": "x"}
    loose = Schema({"name": str}, {"force": False})
    assert loose.strip_unknown({"name": "a", "bogus": 1}) == {"name": "a", "bogus": 1}


def test_cast_record_only_touches_declared_fields():
    s = Schema({"age": int, "born": "temporal"}, {"force": False})
    row = s.cast_record({"age": "30", "born": "2000-01-01", "extra": "30"})
    assert row["age"] == 30
    assert row["born"].is_same("2000-01-01T00:00:00Z")
    assert row["extra"] == "30"


def test_schema_binds_to_one_model_name():
    s = Schema({"name": str})
    s.bind("a")
    s.bind("a")
    with pytest.raises(DuplicateSchemaError):
        s.bind("b")
    s.unbind()
    s.bind("b")
