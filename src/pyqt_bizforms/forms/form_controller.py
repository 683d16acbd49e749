"""
Headless form controller.

Owns the state, recompute engine and validator of one form instance and
drives the editing → submitting → editing cycle. UniversalForm renders a
controller; tests and services can drive one without any widgets.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from pyqt_bizforms.core.background_task import call_maybe_async
from pyqt_bizforms.services.field_change_dispatcher import (
    DispatchResult,
    FieldChangeDispatcher,
    FieldChangeEvent,
)

from .form_config_types import FormConfig
from .form_state import FormState
from .recompute import RecomputeEngine
from .validation import ValidationResult, build_validator

logger = logging.getLogger(__name__)

SubmitHandler = Callable[[Dict[str, Any]], Any]


class FormPhase(Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"


class FormController:
    """
    Example:
        controller = FormController(purchase_form_config())
        controller.set_value("quantity", 3)
        controller.set_value("unit_price", 10)
        controller.get("total_amount")  # 30
        controller.submit(service.create)
    """

    def __init__(self, config: FormConfig, initial_data: Optional[Mapping[str, Any]] = None):
        self.config = config
        # Built first: a cyclic cascade config fails before any state exists
        self.recompute = RecomputeEngine(config)
        self.validator = build_validator(config)
        self.state = FormState(config, initial_data)
        self.errors: Dict[str, str] = {}
        self.phase = FormPhase.EDITING
        self._dispatching = False

    # ========== EDITING ==========

    def get(self, name: str, default: Any = None) -> Any:
        return self.state.get(name, default)

    def values(self) -> Dict[str, Any]:
        return self.state.snapshot()

    def set_value(self, name: str, value: Any) -> DispatchResult:
        """Route one edit through the dispatcher."""
        result = FieldChangeDispatcher.instance().dispatch(FieldChangeEvent(name, value, self))
        if not result.blocked:
            self.errors.pop(name, None)
        return result

    def reset(self, initial_data: Optional[Mapping[str, Any]] = None) -> DispatchResult:
        self.errors = {}
        self.phase = FormPhase.EDITING
        return FieldChangeDispatcher.instance().reset(self, dict(initial_data or {}))

    # ========== SUBMISSION ==========

    @property
    def is_submitting(self) -> bool:
        return self.phase is FormPhase.SUBMITTING

    def prepare_submission(self) -> ValidationResult:
        """Build the payload (hidden fields excluded) and validate it.

        Stores the per-field errors; an empty error map means the payload
        may be handed to a submit handler.
        """
        result = self.validator.validate(self.state.build_payload())
        self.errors = dict(result.errors)
        if not result.ok:
            logger.info(f"Submission of '{self.config.title}' blocked by {len(result.errors)} invalid field(s)")
        return result

    def begin_submit(self) -> None:
        if self.is_submitting:
            raise RuntimeError(f"Form '{self.config.title}' is already submitting")
        self.phase = FormPhase.SUBMITTING

    def finish_submit(self) -> None:
        self.phase = FormPhase.EDITING

    def submit(self, handler: SubmitHandler) -> ValidationResult:
        """
        Validate and, if valid, call handler with the payload on this thread.

        The handler may be a coroutine function. Its exceptions propagate;
        the controller returns to editing either way.

        Returns:
            The validation result (handler not called when it has errors)
        """
        result = self.prepare_submission()
        if not result.ok:
            return result
        self.begin_submit()
        try:
            call_maybe_async(handler, result.payload)
        finally:
            self.finish_submit()
        return result
