"""Task form validation returning field errors as values."""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import ErrorDetails

from src.core.errors import ErrorCategory
from src.core.pump_range import GrammarStage
from src.domain.task_config import PROFILE_MODELS, TRIGGER_FIELDS, SchemaProfile, TaskConfig


logger = logging.getLogger(__name__)

MISSING_TRIGGER = "missing_trigger"
_GRAMMAR_KINDS = {stage.value for stage in GrammarStage}


class FieldError(BaseModel):
    """A validation failure to render next to one form field."""

    path: str = Field(..., description="Dotted field path (e.g., 'pumps'); empty for the whole form")
    message: str = Field(..., description="User-facing message")
    kind: str = Field(..., description="Machine-readable error type (e.g., 'range_bounds', 'missing')")
    category: ErrorCategory = Field(..., description="Grammar, field, or cross-field error")


class TaskValidationResult(BaseModel):
    """Either a validated TaskConfig or the ordered list of field errors."""

    config: TaskConfig | None = Field(None, description="Validated config if every check passed")
    errors: list[FieldError] = Field(default_factory=list, description="Field errors in form order")

    @property
    def success(self) -> bool:
        return self.config is not None


def _categorize(kind: str) -> ErrorCategory:
    if kind == MISSING_TRIGGER:
        return ErrorCategory.SCHEMA_CROSS_FIELD
    if kind in _GRAMMAR_KINDS:
        return ErrorCategory.GRAMMAR
    return ErrorCategory.SCHEMA_FIELD


def _to_field_error(error: ErrorDetails, profile: SchemaProfile) -> FieldError:
    kind = error["type"]
    path = ".".join(str(part) for part in error["loc"])
    if kind == MISSING_TRIGGER:
        path = TRIGGER_FIELDS[profile] or path
    return FieldError(path=path, message=error["msg"], kind=kind, category=_categorize(kind))


def validate(raw: Any, profile: SchemaProfile | str = SchemaProfile.DATE_OR_DEPTH) -> TaskValidationResult:  # noqa: ANN401
    """Validate a raw task form against a validation profile.

    Every field is checked and all failures are reported. The trigger check
    (date or depth) only runs once every field passed.

    Args:
        raw: Form values keyed by field name (camelCase or snake_case)
        profile: Which validation profile to apply

    Returns:
        TaskValidationResult with the config or the field errors
    """
    profile = SchemaProfile(profile)
    model = PROFILE_MODELS[profile]
    try:
        config = model.model_validate(raw)
    except ValidationError as e:
        errors = [_to_field_error(error, profile) for error in e.errors()]
        logger.debug("Task form rejected (%s): %s", profile, [error.path for error in errors])
        return TaskValidationResult(errors=errors)
    return TaskValidationResult(config=config)
