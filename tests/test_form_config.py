"""Tests for the declarative configuration model and validators."""

import pytest
from pydantic import BaseModel

from pyqt_bizforms.forms.form_config_types import (
    FieldValidation, FormConfig, FormFieldConfig, FormFieldType, FormSection, FormSelectOption,
    RecomputeMode,
)
from pyqt_bizforms.forms.form_configs import (
    InvoiceSchema, coupon_form_config, customer_form_config, invoice_form_config,
    organization_form_config, purchase_form_config,
)
from pyqt_bizforms.forms.validation import (
    FORM_ERROR_KEY, PassThroughValidator, SchemaValidator, build_validator,
)


def test_builtin_configs_have_unique_field_names():
    for factory in (customer_form_config, purchase_form_config, invoice_form_config,
                    organization_form_config, coupon_form_config):
        config = factory()
        assert config.duplicate_field_names() == [], config.title
        assert all(f.field_type is not None for f in config.iter_fields())


def test_field_type_parse():
    assert FormFieldType.parse("datetime-local") is FormFieldType.DATETIME_LOCAL
    assert FormFieldType.parse(FormFieldType.FILE) is FormFieldType.FILE
    assert FormFieldType.parse("color") is None


def test_grid_hints():
    assert FormFieldConfig(name="a", label="A", grid_column="md:col-span-2").column_span == 2
    assert FormFieldConfig(name="a", label="A").column_span == 1
    assert FormSection(grid_columns="grid-cols-1 md:grid-cols-3").column_count == 3
    assert FormSection().column_count == 2


def test_get_field_returns_last_declaration():
    config = FormConfig(title="Dup", sections=[
        FormSection(fields=[FormFieldConfig(name="x", label="First")]),
        FormSection(fields=[FormFieldConfig(name="x", label="Second")]),
    ])
    assert config.get_field("x").label == "Second"
    assert config.duplicate_field_names() == ["x"]


def test_with_options_replaces_choices_without_mutating_original():
    config = purchase_form_config()
    loaded = config.with_options("customer_id", [{"value": "c1", "label": "Ada"},
                                                 FormSelectOption("c2", "Grace", disabled=True)])

    assert [o.value for o in loaded.get_field("customer_id").options] == ["c1", "c2"]
    assert loaded.get_field("customer_id").options[1].disabled
    assert config.get_field("customer_id").options == []

    with pytest.raises(KeyError):
        config.with_options("missing", [])


def test_with_overrides_for_edit_mode():
    edit = customer_form_config().with_overrides(title="Edit Customer", submit_label="Update Customer")
    assert edit.title == "Edit Customer"
    assert edit.submit_label == "Update Customer"
    assert edit.field_names() == customer_form_config().field_names()


def test_to_dict_omits_callables():
    data = purchase_form_config().to_dict()
    fields = {f["name"]: f for s in data["sections"] for f in s["fields"]}

    assert "default_value" not in fields["purchase_date"]
    assert "on_change" not in fields["quantity"]
    assert fields["quantity"]["default_value"] == 1
    assert fields["quantity"]["affects"] == ["total_amount"]
    assert fields["total_amount"]["readonly"] is True


def test_from_dict_accepts_camel_case_and_keeps_unknown_types():
    config = FormConfig.from_dict({
        "title": "Imported",
        "submitLabel": "Send",
        "recomputeMode": "cascade",
        "sections": [{
            "gridColumns": "grid-cols-3",
            "fields": [
                {"name": "code", "label": "Code", "type": "text",
                 "validation": {"maxLength": 12, "pattern": "[A-Z0-9]+"}},
                {"name": "tint", "label": "Tint", "type": "color", "gridColumn": "col-span-2"},
            ],
        }],
    })

    assert config.submit_label == "Send"
    assert config.recompute_mode is RecomputeMode.CASCADE
    assert config.sections[0].column_count == 3
    code, tint = config.sections[0].fields
    assert code.validation == FieldValidation(max_length=12, pattern="[A-Z0-9]+")
    assert tint.type == "color"
    assert tint.field_type is None
    assert tint.column_span == 2


def test_dict_round_trip_preserves_structure():
    original = customer_form_config()
    restored = FormConfig.from_dict(original.to_dict())
    assert restored.to_dict() == original.to_dict()


# ========== VALIDATORS ==========

def test_build_validator_selects_mode():
    assert isinstance(build_validator(customer_form_config()), PassThroughValidator)
    assert isinstance(build_validator(invoice_form_config()), SchemaValidator)


def test_schema_validator_requires_pydantic_model():
    with pytest.raises(TypeError):
        SchemaValidator(dict)


def test_schema_validator_one_message_per_field():
    class Contact(BaseModel):
        email: str
        age: int

    result = SchemaValidator(Contact).validate({"age": "not a number"})

    assert set(result.errors) == {"email", "age"}
    assert all(isinstance(message, str) for message in result.errors.values())


def test_model_level_errors_go_to_form_key():
    from pydantic import model_validator

    class Range(BaseModel):
        low: int
        high: int

        @model_validator(mode="after")
        def ordered(self):
            if self.low > self.high:
                raise ValueError("low must not exceed high")
            return self

    result = SchemaValidator(Range).validate({"low": 5, "high": 1})
    assert list(result.errors) == [FORM_ERROR_KEY]


def test_invoice_schema_blank_due_date_and_notes():
    invoice = InvoiceSchema.model_validate({
        "customer_id": "c1", "invoice_number": "INV-1", "invoice_date": "2024-05-01",
        "due_date": "", "notes": "", "subtotal": 10, "tax_amount": 1, "total_amount": 11, "status": "sent",
    })
    assert invoice.due_date is None
    assert invoice.notes is None
    assert str(invoice.invoice_date) == "2024-05-01"
