"""
Form configurations for the dashboard's records.

Choice fields whose options come from the backend (``customer_id``) are
declared empty; fill them with ``config.with_options(...)`` or
``UniversalForm.set_field_options(...)`` once the customers are loaded.
"""

from datetime import date, datetime
from typing import Annotated, Any, Dict, Literal, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, field_validator
from pydantic_core import PydanticCustomError

from pyqt_bizforms.protocols import get_app_config

from .form_config_types import (
    FieldValidation,
    FormConfig,
    FormFieldConfig,
    FormFieldType,
    FormSection,
    FormSelectOption,
)


def _today_iso() -> str:
    return date.today().isoformat()


def _number(value: Any) -> float:
    """Arithmetic view of a number field: "" and None count as 0."""
    return value or 0


# ========== CUSTOMER ==========

def customer_form_config() -> FormConfig:
    return FormConfig(
        title="Customer Information",
        description="Enter customer details",
        submit_label="Save Customer",
        sections=[
            FormSection(
                title="Basic Information",
                grid_columns="grid-cols-1 md:grid-cols-2",
                fields=[
                    FormFieldConfig(name="name", label="Name", type=FormFieldType.TEXT, required=True,
                                    placeholder="Enter customer name"),
                    FormFieldConfig(name="email", label="Email", type=FormFieldType.EMAIL, required=True,
                                    placeholder="Enter email address"),
                    FormFieldConfig(name="phone", label="Phone", type=FormFieldType.TEL, required=True,
                                    placeholder="Enter phone number"),
                    FormFieldConfig(name="company", label="Company", type=FormFieldType.TEXT,
                                    placeholder="Enter company name"),
                    FormFieldConfig(
                        name="status", label="Status", type=FormFieldType.SELECT, default_value="active",
                        options=[FormSelectOption("active", "Active"), FormSelectOption("inactive", "Inactive")],
                    ),
                    FormFieldConfig(name="avatar_url", label="Avatar URL", type=FormFieldType.URL,
                                    placeholder="Enter avatar image URL"),
                ],
            ),
            FormSection(
                title="Address",
                fields=[
                    FormFieldConfig(name="address", label="Address", type=FormFieldType.TEXTAREA,
                                    placeholder="Enter full address", grid_column="md:col-span-2"),
                ],
            ),
        ],
    )


# ========== PURCHASE ==========

def purchase_quantity_changed(value: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"total_amount": _number(value) * _number(data.get("unit_price"))}


def purchase_unit_price_changed(value: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"total_amount": _number(data.get("quantity")) * _number(value)}


def purchase_form_config() -> FormConfig:
    return FormConfig(
        title="Purchase Information",
        description="Enter purchase details",
        submit_label="Save Purchase",
        sections=[
            FormSection(
                title="Purchase Details",
                grid_columns="grid-cols-1 md:grid-cols-2",
                fields=[
                    FormFieldConfig(name="customer_id", label="Customer", type=FormFieldType.SELECT,
                                    required=True, placeholder="Select a customer"),
                    FormFieldConfig(name="product_name", label="Product/Service", type=FormFieldType.TEXT,
                                    required=True, placeholder="Enter product or service name",
                                    grid_column="md:col-span-2"),
                    FormFieldConfig(name="quantity", label="Quantity", type=FormFieldType.NUMBER,
                                    required=True, default_value=1, validation=FieldValidation(min=1),
                                    placeholder="Enter quantity", on_change=purchase_quantity_changed,
                                    affects=("total_amount",)),
                    FormFieldConfig(name="unit_price", label="Unit Price", type=FormFieldType.NUMBER,
                                    required=True, validation=FieldValidation(min=0, step=0.01),
                                    placeholder="Enter unit price", on_change=purchase_unit_price_changed,
                                    affects=("total_amount",)),
                    FormFieldConfig(name="total_amount", label="Total Amount", type=FormFieldType.NUMBER,
                                    readonly=True, validation=FieldValidation(step=0.01)),
                    FormFieldConfig(name="purchase_date", label="Purchase Date", type=FormFieldType.DATE,
                                    required=True, default_value=_today_iso),
                ],
            ),
            FormSection(
                title="Additional Information",
                fields=[
                    FormFieldConfig(name="notes", label="Notes", type=FormFieldType.TEXTAREA,
                                    placeholder="Enter any additional notes", grid_column="md:col-span-2"),
                ],
            ),
        ],
    )


# ========== INVOICE ==========

def _required_text(message: str):
    def check(value: Any) -> str:
        if value is None or str(value) == "":
            raise PydanticCustomError("required", message)
        return str(value)
    return check


def _date_part(value: Any) -> Any:
    """Stored invoices carry ISO datetimes; the form edits their calendar date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        except ValueError:
            return value
    return value


def _non_negative(message: str):
    def check(value: float) -> float:
        if value < 0:
            raise PydanticCustomError("non_negative", message)
        return value
    return check


class InvoiceSchema(BaseModel):
    """Submission schema of the invoice form."""

    customer_id: Annotated[str, BeforeValidator(_required_text("Customer is required"))] = Field(
        default=None, validate_default=True)
    invoice_number: Annotated[str, BeforeValidator(_required_text("Invoice number is required"))] = Field(
        default=None, validate_default=True)
    invoice_date: Annotated[date, BeforeValidator(_date_part)]
    due_date: Annotated[Optional[date], BeforeValidator(_date_part)] = None
    subtotal: Annotated[float, AfterValidator(_non_negative("Subtotal must be positive"))]
    tax_amount: Annotated[float, AfterValidator(_non_negative("Tax amount must be positive"))]
    total_amount: Annotated[float, AfterValidator(_non_negative("Total amount must be positive"))]
    status: Literal["draft", "sent", "paid", "overdue"]
    notes: Optional[str] = None

    @field_validator("due_date", "notes", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        return None if value == "" else value


def invoice_subtotal_changed(value: Any, data: Dict[str, Any]) -> Dict[str, Any]:
    subtotal = _number(value)
    tax_amount = subtotal * get_app_config().default_tax_rate
    return {
        "tax_amount": round(tax_amount, 2),
        "total_amount": round(subtotal + tax_amount, 2),
    }


def invoice_form_config() -> FormConfig:
    money = FieldValidation(min=0, step=0.01)
    return FormConfig(
        title="Invoice Information",
        description="Create or edit invoice details",
        submit_label="Save Invoice",
        validation_schema=InvoiceSchema,
        sections=[
            FormSection(
                title="Basic Information",
                grid_columns="grid-cols-1 md:grid-cols-2",
                fields=[
                    FormFieldConfig(name="customer_id", label="Customer", type=FormFieldType.SELECT,
                                    required=True, placeholder="Select a customer"),
                    FormFieldConfig(name="invoice_number", label="Invoice Number", type=FormFieldType.TEXT,
                                    required=True, placeholder="INV-001"),
                    FormFieldConfig(
                        name="status", label="Status", type=FormFieldType.SELECT, default_value="draft",
                        options=[
                            FormSelectOption("draft", "Draft"),
                            FormSelectOption("sent", "Sent"),
                            FormSelectOption("paid", "Paid"),
                            FormSelectOption("overdue", "Overdue"),
                        ],
                    ),
                    FormFieldConfig(name="invoice_date", label="Invoice Date", type=FormFieldType.DATEPICKER,
                                    required=True, default_value=date.today),
                    FormFieldConfig(name="due_date", label="Due Date (Optional)", type=FormFieldType.DATEPICKER,
                                    description="Optional due date for payment"),
                ],
            ),
            FormSection(
                title="Financial Details",
                grid_columns="grid-cols-1 md:grid-cols-3",
                fields=[
                    FormFieldConfig(name="subtotal", label="Subtotal", type=FormFieldType.NUMBER, required=True,
                                    validation=money, placeholder="0.00", on_change=invoice_subtotal_changed,
                                    affects=("tax_amount", "total_amount")),
                    FormFieldConfig(name="tax_amount", label="Tax Amount", type=FormFieldType.NUMBER,
                                    required=True, validation=money, placeholder="0.00"),
                    FormFieldConfig(name="total_amount", label="Total Amount", type=FormFieldType.NUMBER,
                                    required=True, validation=money, placeholder="0.00", disabled=True),
                ],
            ),
            FormSection(
                title="Additional Information",
                fields=[
                    FormFieldConfig(name="notes", label="Notes (Optional)", type=FormFieldType.TEXTAREA,
                                    placeholder="Additional notes for this invoice...",
                                    grid_column="md:col-span-2"),
                ],
            ),
        ],
    )


# ========== ORGANIZATION ==========

def organization_form_config() -> FormConfig:
    return FormConfig(
        title="Organization Information",
        description="Enter organization details",
        submit_label="Save Organization",
        sections=[
            FormSection(fields=[
                FormFieldConfig(name="name", label="Organization Name", type=FormFieldType.TEXT, required=True,
                                placeholder="Enter organization name", grid_column="md:col-span-2"),
                FormFieldConfig(name="description", label="Description", type=FormFieldType.TEXTAREA,
                                placeholder="Enter organization description", grid_column="md:col-span-2"),
            ]),
        ],
    )


# ========== COUPON ==========

def coupon_form_config() -> FormConfig:
    return FormConfig(
        title="Coupon Information",
        description="Create or edit coupon details",
        submit_label="Save Coupon",
        sections=[
            FormSection(
                title="Basic Information",
                grid_columns="grid-cols-1 md:grid-cols-2",
                fields=[
                    FormFieldConfig(name="code", label="Coupon Code", type=FormFieldType.TEXT, required=True,
                                    placeholder="Enter coupon code"),
                    FormFieldConfig(
                        name="discount_type", label="Discount Type", type=FormFieldType.SELECT, required=True,
                        options=[FormSelectOption("fixed", "Fixed Amount"),
                                 FormSelectOption("percentage", "Percentage")],
                    ),
                    FormFieldConfig(name="discount_value", label="Discount Value", type=FormFieldType.NUMBER,
                                    required=True, validation=FieldValidation(min=0, step=0.01),
                                    placeholder="Enter discount value"),
                    FormFieldConfig(name="max_uses", label="Maximum Uses", type=FormFieldType.NUMBER,
                                    validation=FieldValidation(min=1), placeholder="Enter maximum uses"),
                    FormFieldConfig(name="expires_at", label="Expiry Date", type=FormFieldType.DATEPICKER,
                                    placeholder="Select expiry date"),
                    FormFieldConfig(name="is_active", label="Active", type=FormFieldType.CHECKBOX,
                                    default_value=True),
                ],
            ),
        ],
    )
