"""
Validation dispatch.

Two mutually exclusive modes, chosen by ``FormConfig.validation_schema``:

- Schema mode: the payload is validated by a pydantic model on submit; the
  handler receives the model's dumped (coerced, unknown keys dropped) data,
  and every failing field gets one message.
- Schema-less mode: the payload passes through untouched. required/min/max
  stay widget-level hints.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Type

from pydantic import BaseModel, ValidationError

from .form_config_types import FormConfig

logger = logging.getLogger(__name__)

# Key for errors not attributable to one field
FORM_ERROR_KEY = "__form__"


@dataclass
class ValidationResult:
    payload: Dict[str, Any]
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class FormValidator(ABC):
    """Validates a submission payload."""

    @abstractmethod
    def validate(self, payload: Mapping[str, Any]) -> ValidationResult:
        pass


class PassThroughValidator(FormValidator):
    """Schema-less mode: no client-side validation."""

    def validate(self, payload: Mapping[str, Any]) -> ValidationResult:
        return ValidationResult(payload=dict(payload))


class SchemaValidator(FormValidator):
    """Schema mode backed by a pydantic model class."""

    def __init__(self, schema: Type[BaseModel]):
        if not (isinstance(schema, type) and issubclass(schema, BaseModel)):
            raise TypeError(f"validation_schema must be a pydantic BaseModel subclass, got {schema!r}")
        self.schema = schema

    def validate(self, payload: Mapping[str, Any]) -> ValidationResult:
        try:
            model = self.schema.model_validate(dict(payload))
        except ValidationError as e:
            errors = self.errors_by_field(e)
            logger.debug(f"{self.schema.__name__} rejected submission: {errors}")
            return ValidationResult(payload=dict(payload), errors=errors)
        return ValidationResult(payload=model.model_dump())

    @staticmethod
    def errors_by_field(error: ValidationError) -> Dict[str, str]:
        """First message per top-level field."""
        errors: Dict[str, str] = {}
        for detail in error.errors():
            loc = detail.get("loc") or ()
            key = str(loc[0]) if loc else FORM_ERROR_KEY
            errors.setdefault(key, detail.get("msg", "Invalid value"))
        return errors


def build_validator(config: FormConfig) -> FormValidator:
    if config.validation_schema is not None:
        return SchemaValidator(config.validation_schema)
    return PassThroughValidator()
