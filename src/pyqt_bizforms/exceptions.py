"""Exception hierarchy for pyqt-bizforms."""

from typing import Optional


class BizFormsError(Exception):
    """Base class for all pyqt-bizforms errors."""


class FormConfigError(BizFormsError):
    """Raised when a FormConfig is structurally invalid (e.g. a dependency cycle)."""


class UnknownFieldTypeError(FormConfigError):
    """Raised in strict mode when a field declares a type the interpreter cannot render."""

    def __init__(self, field_name: str, field_type: str):
        super().__init__(f"Field '{field_name}' has unknown type '{field_type}'")
        self.field_name = field_name
        self.field_type = field_type


class BackendError(BizFormsError):
    """Raised when the table client reports an error for a query."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class NotAuthenticatedError(BizFormsError):
    """Raised when an operation needs a signed-in user and there is none."""


class PaymentSessionNotFound(BizFormsError):
    """Raised when a payment session id has no stored session."""
