from datetime import datetime, timezone

import pytest

from schemadb.db.query import FieldError
from schemadb.db.schema import Schema
from schemadb.handlers.validator_handler import ValidatorHandler
from schemadb.managers.log_manager import LogManager
from schemadb.managers.validator_manager import ValidatorManager


@pytest.fixture
def schema():
    return Schema({
        "name": {"type": "text", "required": True, "min": 2, "max": 5},
        "age": {"type": "number", "min": 0, "max": 120},
        "code": {"type": "text", "match": r"^[A-Z]{3}$"},
        "email": {"type": "text", "unique": True},
        "tags": list,
        "born": "temporal",
    }, {"timestamps": False})


def kinds(errors, field):
    return [e.kind for e in errors[field]]


def test_valid_candidate_returns_none(schema):
    assert ValidatorHandler.run(schema, {
        "name": "Ann", "age": 30, "code": "ABC", "tags": ["a"],
        "born": datetime(1994, 3, 1, tzinfo=timezone.utc),
    }) is None


def test_checks_are_independent_and_ordered(schema):
    errors = ValidatorHandler.run(schema, {"name": ""})
    assert kinds(errors, "name") == ["required", "min"]

    errors = ValidatorHandler.run(schema, {"name": 42})
    assert kinds(errors, "name") == ["type", "required"]


@pytest.mark.parametrize("candidate, field, expected", [
    ({"age": 200}, "age", ["max"]),
    ({"age": -1}, "age", ["min"]),
    ({"age": "30"}, "age", ["type"]),
    ({"name": "Annabel"}, "name", ["max"]),
    ({"code": "abc"}, "code", ["match"]),
    ({"tags": "x"}, "tags", ["type"]),
    ({"born": "2024-01-01"}, "born", ["type"]),
])
def test_single_constraint_failures(schema, candidate, field, expected):
    errors = ValidatorHandler.run(schema, candidate)
    assert kinds(errors, field) == expected


def test_error_objects_carry_field_kind_and_message(schema):
    errors = ValidatorHandler.run(schema, {"code": "abc"})
    err = errors["code"][0]
    assert isinstance(err, FieldError)
    assert err.field == "code"
    assert "^[A-Z]{3}$" in err.message


def test_custom_match_message():
    s = Schema({"zip": {"type": "text", "match": (r"^\d{4}$", "zip must be four digits")}})
    errors = ValidatorHandler.run(s, {"zip": "12a"})
    assert errors["zip"][0].message == "zip must be four digits"


def test_absent_and_undeclared_fields_are_not_checked(schema):
    # name is required, but only present fields are validated
    assert ValidatorHandler.run(schema, {"age": 5}) is None
    assert ValidatorHandler.run(schema, {"whatever": object()}) is None


def test_empty_optional_values_pass_type_check(schema):
    assert ValidatorHandler.run(schema, {"tags": [], "born": ""}) is None


def test_unique_uses_supplied_lookup(schema):
    taken = {"taken@example.com"}
    check = lambda field, value: value not in taken

    errors = ValidatorHandler.run(schema, {"email": "taken@example.com"}, unique_check=check)
    assert kinds(errors, "email") == ["unique"]
    assert "taken@example.com" in errors["email"][0].message

    assert ValidatorHandler.run(schema, {"email": "free@example.com"}, unique_check=check) is None
    # without a lookup there is nothing to compare against
    assert ValidatorHandler.run(schema, {"email": "taken@example.com"}) is None


def test_manager_logs_failed_validation(schema):
    errors = ValidatorManager.validate(schema, {"age": 999}, label=":person")
    assert kinds(errors, "age") == ["max"]
    level, message = LogManager.read(last_only=True, component="Validator:person")
    assert level == "WARNING"
    assert "'age': ['max']" in message


def test_empty_optional_values_skip_bounds_match_and_unique(schema):
    clash = lambda field, value: False
    assert ValidatorHandler.run(schema, {"code": "", "email": "", "name": "Ann"}, unique_check=clash) is None
    assert ValidatorHandler.run(schema, {"code": None, "tags": []}) is None
    # numbers are never empty, so bounds still apply
    assert kinds(ValidatorHandler.run(schema, {"age": -0.5}), "age") == ["min"]
