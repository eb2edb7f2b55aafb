# ============================================================================
# File:       schemadb/managers/validator_manager.py
# Purpose:    Central validation API (logging around ValidatorHandler)
# Created:    2025-08-13
# Updated:    2025-08-19
# ============================================================================

from __future__ import annotations
from typing import Any, Dict, List, Optional

from schemadb.db.query import FieldError
from schemadb.db.schema import Schema
from schemadb.handlers.validator_handler import UniqueCheck, ValidatorHandler
from schemadb.managers.error_manager import ErrorManager
from schemadb.managers.log_manager import LogManager


class ValidatorManager:

    @staticmethod
    def validate(
        schema: Schema,
        candidate: Dict[str, Any],
        *,
        unique_check: Optional[UniqueCheck] = None,
        label: str = "",
    ) -> Optional[Dict[str, List[FieldError]]]:
        """Returns {field: [FieldError, ...]} or None when the candidate is valid."""
        try:
            errors = ValidatorHandler.run(schema, candidate, unique_check=unique_check)
        except Exception as e:
            ErrorManager.create(e)
            LogManager.scoped(f"Validator{label}").error(f"unexpected validation error: {e}")
            raise
        if errors:
            summary = {f: [err.kind for err in errs] for f, errs in errors.items()}
            LogManager.scoped(f"Validator{label}").warning(f"validation failed: {summary}")
        return errors
