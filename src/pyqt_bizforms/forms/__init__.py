"""
Form engine and interpreter.

Headless pieces (config types, state, recompute, visibility, validation,
controller) import without a QApplication; UniversalForm and the widget
factory need PyQt6. Everything is exported lazily.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .form_config_types import (
        FieldValidation, FormConfig, FormFieldConfig, FormFieldType, FormSection,
        FormSelectOption, RecomputeMode,
    )
    from .form_controller import FormController, FormPhase
    from .form_state import FormState
    from .recompute import DependencyGraph, RecomputeEngine
    from .validation import PassThroughValidator, SchemaValidator, ValidationResult, build_validator
    from .universal_form import UniversalForm
    from .widget_factory import FieldWidgetFactory, WIDGET_TYPE_REGISTRY
    from .widget_dispatcher import WidgetDispatcher

_EXPORTS = {
    "FieldValidation": ("pyqt_bizforms.forms.form_config_types", "FieldValidation"),
    "FormConfig": ("pyqt_bizforms.forms.form_config_types", "FormConfig"),
    "FormFieldConfig": ("pyqt_bizforms.forms.form_config_types", "FormFieldConfig"),
    "FormFieldType": ("pyqt_bizforms.forms.form_config_types", "FormFieldType"),
    "FormSection": ("pyqt_bizforms.forms.form_config_types", "FormSection"),
    "FormSelectOption": ("pyqt_bizforms.forms.form_config_types", "FormSelectOption"),
    "RecomputeMode": ("pyqt_bizforms.forms.form_config_types", "RecomputeMode"),
    "FormController": ("pyqt_bizforms.forms.form_controller", "FormController"),
    "FormPhase": ("pyqt_bizforms.forms.form_controller", "FormPhase"),
    "FormState": ("pyqt_bizforms.forms.form_state", "FormState"),
    "DependencyGraph": ("pyqt_bizforms.forms.recompute", "DependencyGraph"),
    "RecomputeEngine": ("pyqt_bizforms.forms.recompute", "RecomputeEngine"),
    "PassThroughValidator": ("pyqt_bizforms.forms.validation", "PassThroughValidator"),
    "SchemaValidator": ("pyqt_bizforms.forms.validation", "SchemaValidator"),
    "ValidationResult": ("pyqt_bizforms.forms.validation", "ValidationResult"),
    "build_validator": ("pyqt_bizforms.forms.validation", "build_validator"),
    "is_field_visible": ("pyqt_bizforms.forms.visibility", "is_field_visible"),
    "UniversalForm": ("pyqt_bizforms.forms.universal_form", "UniversalForm"),
    "FieldWidgetFactory": ("pyqt_bizforms.forms.widget_factory", "FieldWidgetFactory"),
    "WIDGET_TYPE_REGISTRY": ("pyqt_bizforms.forms.widget_factory", "WIDGET_TYPE_REGISTRY"),
    "WidgetDispatcher": ("pyqt_bizforms.forms.widget_dispatcher", "WidgetDispatcher"),
    "FormLayoutConfig": ("pyqt_bizforms.forms.layout_constants", "FormLayoutConfig"),
    "customer_form_config": ("pyqt_bizforms.forms.form_configs", "customer_form_config"),
    "purchase_form_config": ("pyqt_bizforms.forms.form_configs", "purchase_form_config"),
    "invoice_form_config": ("pyqt_bizforms.forms.form_configs", "invoice_form_config"),
    "organization_form_config": ("pyqt_bizforms.forms.form_configs", "organization_form_config"),
    "coupon_form_config": ("pyqt_bizforms.forms.form_configs", "coupon_form_config"),
    "InvoiceSchema": ("pyqt_bizforms.forms.form_configs", "InvoiceSchema"),
}


def __getattr__(name: str):
    if name in _EXPORTS:
        module_name, attr = _EXPORTS[name]
        module = importlib.import_module(module_name)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_EXPORTS.keys())
