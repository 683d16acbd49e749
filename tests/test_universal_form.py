"""Tests for the UniversalForm interpreter."""

import threading

import pytest

from pyqt_bizforms.forms.form_config_types import (
    FormConfig, FormFieldConfig, FormFieldType, FormSection, FormSelectOption,
)
from pyqt_bizforms.forms.form_configs import (
    customer_form_config, invoice_form_config, purchase_form_config,
)
from pyqt_bizforms.forms.universal_form import UniversalForm
from pyqt_bizforms.protocols import ComboBoxAdapter, NumberEditAdapter


def _account_config():
    return FormConfig(
        title="Account",
        show_card=False,
        sections=[FormSection(fields=[
            FormFieldConfig(
                name="kind", label="Kind", type=FormFieldType.SELECT, default_value="person",
                options=[FormSelectOption("person", "Person"), FormSelectOption("business", "Business")],
            ),
            FormFieldConfig(name="company", label="Company", depends_on="kind",
                            condition=lambda kind: kind == "business"),
        ])],
    )


def _capture(signal):
    received = []
    signal.connect(lambda *args: received.append(args if len(args) != 1 else args[0]))
    return received


def test_one_control_per_field(qapp):
    config = purchase_form_config()
    form = UniversalForm(config)

    assert list(form.widgets) == config.field_names()
    assert form.rendered_field_names() == config.field_names()
    assert isinstance(form.widgets["quantity"], NumberEditAdapter)
    assert form.title_label.text() == "Purchase Information"
    assert form.submit_button.text() == "Save Purchase"


def test_initial_state_is_shown_in_controls(qapp):
    form = UniversalForm(customer_form_config(), {"name": "Ada"})
    assert form.widgets["name"].get_value() == "Ada"
    assert form.widgets["status"].get_value() == "active"


def test_untouched_edit_form_submits_initial_data(qapp):
    row = {"id": "cust-1", "name": "Ada", "created_at": "2024-01-01"}
    received = []
    form = UniversalForm(customer_form_config(), row, on_submit=received.append)

    assert form.submit() is True
    assert received == [row]


def test_edit_updates_derived_widget(qapp):
    form = UniversalForm(purchase_form_config())
    changes = _capture(form.parameter_changed)

    form.update_parameter("quantity", 3)
    form.update_parameter("unit_price", 10)

    assert form.values()["total_amount"] == 30
    assert form.widgets["total_amount"].get_value() == 30
    assert changes[-2:] == [("unit_price", 10), ("total_amount", 30)]


def test_user_edit_signal_routes_through_controller(qapp):
    form = UniversalForm(purchase_form_config(), {"unit_price": 5})
    quantity = form.widgets["quantity"]

    quantity.setText("4")
    quantity.textEdited.emit("4")

    assert form.values()["quantity"] == 4
    assert form.widgets["total_amount"].get_value() == 20


def test_select_activation_updates_state(qapp):
    form = UniversalForm(_account_config())
    kind = form.widgets["kind"]
    assert isinstance(kind, ComboBoxAdapter)

    kind.setCurrentIndex(1)
    kind.activated.emit(1)

    assert form.values()["kind"] == "business"
    assert form.is_field_rendered("company")


def test_condition_hides_and_shows_field(qapp):
    form = UniversalForm(_account_config())
    assert not form.is_field_rendered("company")

    form.update_parameter("kind", "business")
    form.update_parameter("company", "Acme")
    assert form.rendered_field_names() == ["kind", "company"]

    form.update_parameter("kind", "person")
    assert not form.is_field_rendered("company")
    assert form.values()["company"] == "Acme"


def test_patched_edited_field_is_redrawn(qapp):
    config = FormConfig(title="Coupon", sections=[FormSection(fields=[
        FormFieldConfig(name="code", label="Code", on_change=lambda value, data: {"code": value.upper()}),
    ])])
    form = UniversalForm(config)

    form.update_parameter("code", "save10")

    assert form.widgets["code"].get_value() == "SAVE10"


def test_schema_less_submit_passes_empty_required_fields(qapp):
    received = []
    form = UniversalForm(customer_form_config(), on_submit=received.append)
    submitted = _capture(form.submitted)

    assert form.submit() is True
    assert received == [{"status": "active"}]
    assert submitted == [{"status": "active"}]


def test_submit_without_handler_emits_payload(qapp):
    form = UniversalForm(customer_form_config(), {"name": "Ada"})
    submitted = _capture(form.submitted)

    form.submit()

    assert submitted[0]["name"] == "Ada"


def test_schema_errors_are_shown_beside_fields(qapp):
    received = []
    form = UniversalForm(invoice_form_config(), on_submit=received.append)
    failures = _capture(form.validation_failed)

    assert form.submit() is False

    assert received == []
    assert failures[0]["customer_id"] == "Customer is required"
    assert form.error_text("customer_id") == "Customer is required"
    assert form.error_text("invoice_number") == "Invoice number is required"

    form.update_parameter("customer_id", "c1")
    assert form.error_text("customer_id") == ""


def test_valid_invoice_is_submitted(qapp):
    received = []
    form = UniversalForm(
        invoice_form_config().with_options("customer_id", [FormSelectOption("c1", "Ada")]),
        on_submit=received.append,
    )
    form.update_parameter("customer_id", "c1")
    form.update_parameter("invoice_number", "INV-7")
    form.update_parameter("subtotal", 200)

    assert form.submit() is True
    assert received[0]["total_amount"] == 220.0
    assert form.widgets["tax_amount"].get_value() == 20


def test_handler_exception_emits_submit_failed(qapp):
    def failing(payload):
        raise RuntimeError("backend down")

    form = UniversalForm(customer_form_config(), on_submit=failing)
    failures = _capture(form.submit_failed)

    assert form.submit() is False
    assert str(failures[0]) == "backend down"
    assert not form.controller.is_submitting


def test_submit_ignored_while_loading(qapp):
    received = []
    form = UniversalForm(customer_form_config(), on_submit=received.append)

    form.set_loading(True)
    assert not form.submit_button.isEnabled()
    assert form.submit() is False
    assert received == []

    form.set_loading(False)
    assert form.submit() is True


def test_cancel_button_only_when_requested(qapp):
    assert UniversalForm(customer_form_config()).cancel_button is None

    calls = []
    form = UniversalForm(customer_form_config(), on_cancel=lambda: calls.append("cancel"))
    cancelled = _capture(form.cancelled)
    assert form.cancel_button.text() == "Cancel"

    form.cancel_button.click()
    assert calls == ["cancel"]
    assert len(cancelled) == 1

    labelled = UniversalForm(customer_form_config().with_overrides(cancel_label="Back"))
    assert labelled.cancel_button.text() == "Back"


def test_set_field_options_keeps_state_value(qapp):
    form = UniversalForm(purchase_form_config(), {"customer_id": "c2"})
    form.set_field_options("customer_id", [FormSelectOption("c1", "Ada"), FormSelectOption("c2", "Grace")])

    assert form.widgets["customer_id"].count() == 2
    assert form.widgets["customer_id"].get_value() == "c2"
    with pytest.raises(KeyError):
        form.set_field_options("nope", [])


def test_reset_redraws_controls_and_clears_errors(qapp):
    form = UniversalForm(invoice_form_config())
    form.submit()
    form.update_parameter("subtotal", 50)

    form.reset({"invoice_number": "INV-9"})

    assert form.widgets["invoice_number"].get_value() == "INV-9"
    assert form.widgets["subtotal"].get_value() == ""
    assert form.error_text("customer_id") == ""
    assert form.values() == {"invoice_number": "INV-9"}
    assert form.widgets["status"].get_value() == "draft"

    form.reset()
    assert form.values()["status"] == "draft"


def test_unknown_field_type_in_strict_mode(qapp):
    from pyqt_bizforms.exceptions import UnknownFieldTypeError

    config = FormConfig(title="Odd", sections=[FormSection(fields=[
        FormFieldConfig(name="tint", label="Tint", type="color"),
    ])])
    assert "tint" in UniversalForm(config).widgets
    with pytest.raises(UnknownFieldTypeError):
        UniversalForm(config, strict=True)


def test_background_submit_restores_button(qapp):
    received = []
    form = UniversalForm(customer_form_config(), {"name": "Ada"}, on_submit=received.append,
                         run_submit_in_background=True)
    submitted = _capture(form.submitted)

    assert form.submit() is True
    assert not form.submit_button.isEnabled()
    assert form.submit_button.text() == "Submitting..."

    form._task_manager._task.wait(5000)
    qapp.processEvents()

    assert received[0]["name"] == "Ada"
    assert submitted[0]["name"] == "Ada"
    assert form.submit_button.isEnabled()
    assert form.submit_button.text() == "Save Customer"
    assert not form.controller.is_submitting


def test_closing_during_background_submit_leaves_form_usable(qapp):
    release = threading.Event()
    received = []

    def slow_save(payload):
        release.wait(5)
        received.append(payload)

    form = UniversalForm(customer_form_config(), {"name": "Ada"}, on_submit=slow_save,
                         run_submit_in_background=True)
    submitted = _capture(form.submitted)
    form.show()
    assert form.submit() is True
    task = form._task_manager._task

    form.close()
    release.set()
    task.wait(5000)
    qapp.processEvents()

    assert received[0]["name"] == "Ada"
    assert submitted == []
    assert not form.controller.is_submitting
    assert form.submit_button.isEnabled()
    assert form.submit_button.text() == "Save Customer"

    form.run_submit_in_background = False
    assert form.submit() is True
