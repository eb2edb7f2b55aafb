# ============================================================================
# File:       schemadb/handlers/validator_handler.py
# Purpose:    Core per-field constraint checks against a Schema
# Created:    2025-08-13
# Updated:    2025-08-19
# ============================================================================

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional

from schemadb.db.query import FieldError
from schemadb.db.schema import FieldDefinition, Schema
from schemadb.db.types import FieldType, detect_type, is_temporal

# unique_check(field, value) -> True when no OTHER row holds the value
UniqueCheck = Callable[[str, Any], bool]

_KIND_NAMES = {
    FieldType.TEXT: "text",
    FieldType.NUMBER: "number",
    FieldType.BOOLEAN: "boolean",
    FieldType.TEMPORAL: "temporal",
    FieldType.LIST: "list",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (str, list)) and not value)


class ValidatorHandler:
    """
    Runs, for every declared field present on the candidate, the configured
    constraints in a fixed order: type, required, min, max, match, unique.
    Every check is independent; a field may collect several errors.
    """

    @staticmethod
    def run(
        schema: Schema,
        candidate: Dict[str, Any],
        *,
        unique_check: Optional[UniqueCheck] = None,
    ) -> Optional[Dict[str, List[FieldError]]]:
        errors: Dict[str, List[FieldError]] = {}

        def add(fdef: FieldDefinition, kind: str, message: str):
            errors.setdefault(fdef.name, []).append(FieldError(fdef.name, kind, message))

        for key, value in candidate.items():
            fdef = schema.field(key)
            if fdef is None:
                continue
            # an empty optional value is only type checked
            skip_rest = _is_empty(value) and not fdef.required
            for kind in fdef.constraints():
                if skip_rest and kind != "type":
                    continue
                check = _CHECKS[kind]
                if kind == "unique":
                    check(fdef, value, add, unique_check)
                else:
                    check(fdef, value, add)

        return errors or None

    # ---------- checks ----------
    @staticmethod
    def check_type(fdef: FieldDefinition, value: Any, add) -> None:
        actual = detect_type(value)
        if actual is fdef.type:
            return
        if not value and not fdef.required:
            return
        if fdef.type is FieldType.TEMPORAL and is_temporal(value):
            return
        got = _KIND_NAMES.get(actual, type(value).__name__)
        add(fdef, "type", f"{fdef.name} was given type {got} but requires {_KIND_NAMES[fdef.type]}")

    @staticmethod
    def check_required(fdef: FieldDefinition, value: Any, add) -> None:
        ftype = fdef.type
        if value is None:
            missing = True
        elif ftype is FieldType.TEXT:
            missing = not isinstance(value, str) or not len(value)
        elif ftype is FieldType.NUMBER:
            missing = not _is_number(value)
        elif ftype is FieldType.BOOLEAN:
            missing = not isinstance(value, bool)
        elif ftype is FieldType.TEMPORAL:
            missing = not is_temporal(value)
        elif ftype is FieldType.LIST:
            missing = not isinstance(value, list)
        else:
            missing = False
        if missing:
            add(fdef, "required", f"{fdef.name} is required")

    @staticmethod
    def check_min(fdef: FieldDefinition, value: Any, add) -> None:
        if fdef.type is FieldType.TEXT and isinstance(value, str) and len(value) < fdef.min:
            add(fdef, "min", f"{fdef.name} must be at least {fdef.min} characters.")
        elif fdef.type is FieldType.NUMBER and _is_number(value) and value < fdef.min:
            add(fdef, "min", f"{fdef.name} must be at least {fdef.min}.")

    @staticmethod
    def check_max(fdef: FieldDefinition, value: Any, add) -> None:
        if fdef.type is FieldType.TEXT and isinstance(value, str) and len(value) > fdef.max:
            add(fdef, "max", f"{fdef.name} must be at most {fdef.max} characters.")
        elif fdef.type is FieldType.NUMBER and _is_number(value) and value > fdef.max:
            add(fdef, "max", f"{fdef.name} must be at most {fdef.max}.")

    @staticmethod
    def check_match(fdef: FieldDefinition, value: Any, add) -> None:
        pattern, message = fdef.match
        if value is None or not pattern.search(str(value)):
            add(fdef, "match", message or f"{fdef.name} does not match expression {pattern.pattern}")

    @staticmethod
    def check_unique(fdef: FieldDefinition, value: Any, add, unique_check: Optional[UniqueCheck]) -> None:
        if unique_check is None or value is None:
            return
        if not unique_check(fdef.name, value):
            add(fdef, "unique", f"{value} is not unique.")


_CHECKS = {
    "type": ValidatorHandler.check_type,
    "required": ValidatorHandler.check_required,
    "min": ValidatorHandler.check_min,
    "max": ValidatorHandler.check_max,
    "match": ValidatorHandler.check_match,
    "unique": ValidatorHandler.check_unique,
}
