"""
Field interpreter: FormFieldType → control.

Closed dispatch over the field type through WIDGET_TYPE_REGISTRY. Native
hints (placeholder, range, max length, pattern, disabled, readonly) are
applied here; nothing in this module enforces them on submit.
"""

import logging
from typing import Callable, Dict

from PyQt6.QtWidgets import QAbstractSpinBox, QLineEdit, QPlainTextEdit, QWidget

from pyqt_bizforms.exceptions import UnknownFieldTypeError
from pyqt_bizforms.protocols import (
    CheckBoxAdapter,
    ComboBoxAdapter,
    DatePickerAdapter,
    FilePathAdapter,
    LineEditAdapter,
    NumberEditAdapter,
    OptionSelectable,
    PlaceholderCapable,
    RadioGroupAdapter,
    RangeConfigurable,
    TextAreaAdapter,
)

from .form_config_types import TEXT_LIKE_TYPES, FormFieldConfig, FormFieldType
from .widget_dispatcher import WidgetDispatcher

logger = logging.getLogger(__name__)


def _password_edit() -> QWidget:
    widget = LineEditAdapter()
    widget.setEchoMode(QLineEdit.EchoMode.Password)
    return widget


# Type-based widget creation dispatch - NO DUCK TYPING
WIDGET_TYPE_REGISTRY: Dict[FormFieldType, Callable[[], QWidget]] = {
    **{field_type: LineEditAdapter for field_type in TEXT_LIKE_TYPES},
    FormFieldType.PASSWORD: _password_edit,
    FormFieldType.NUMBER: NumberEditAdapter,
    FormFieldType.TEXTAREA: TextAreaAdapter,
    FormFieldType.SELECT: ComboBoxAdapter,
    FormFieldType.CHECKBOX: CheckBoxAdapter,
    FormFieldType.RADIO: RadioGroupAdapter,
    FormFieldType.DATEPICKER: DatePickerAdapter,
    FormFieldType.FILE: FilePathAdapter,
}

# Controls that support a read-only mode; the rest are disabled instead
_READONLY_CAPABLE = (QLineEdit, QPlainTextEdit, QAbstractSpinBox, FilePathAdapter)


class FieldWidgetFactory:
    """
    Creates one control per field.

    Args:
        strict: Raise UnknownFieldTypeError for unknown type strings instead
            of falling back to a text control with a warning.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def create(self, field: FormFieldConfig) -> QWidget:
        field_type = field.field_type
        if field_type is None:
            if self.strict:
                raise UnknownFieldTypeError(field.name, str(field.type))
            logger.warning(f"Field '{field.name}' has unknown type '{field.type}', rendering as text")
            field_type = FormFieldType.TEXT

        widget = WIDGET_TYPE_REGISTRY[field_type]()
        widget.setObjectName(field.name)
        self._apply_hints(widget, field, field_type)
        logger.debug(f"Created {type(widget).__name__} for field '{field.name}' ({field_type.value})")
        return widget

    def _apply_hints(self, widget: QWidget, field: FormFieldConfig, field_type: FormFieldType) -> None:
        if isinstance(widget, OptionSelectable):
            WidgetDispatcher.set_options(widget, field.options)

        if field.placeholder and isinstance(widget, PlaceholderCapable):
            WidgetDispatcher.set_placeholder(widget, field.placeholder)

        validation = field.validation
        if validation is not None:
            if isinstance(widget, RangeConfigurable) and (
                validation.min is not None or validation.max is not None or validation.step is not None
            ):
                WidgetDispatcher.configure_range(widget, validation.min, validation.max, validation.step)
            if validation.max_length is not None and isinstance(widget, QLineEdit):
                widget.setMaxLength(validation.max_length)
            if validation.pattern and isinstance(widget, LineEditAdapter):
                widget.set_pattern(validation.pattern)

        # Marker only; schema mode is what blocks submission
        widget.setProperty("required", field.required)
        if field.description:
            widget.setToolTip(field.description)

        if field.readonly:
            if isinstance(widget, _READONLY_CAPABLE):
                widget.setReadOnly(True)
            else:
                widget.setEnabled(False)
        if field.disabled:
            widget.setEnabled(False)
