"""Tests for widget adapters, the widget dispatcher and the field factory."""

import datetime

import pytest
from PyQt6.QtWidgets import QLabel, QLineEdit

from pyqt_bizforms.exceptions import UnknownFieldTypeError
from pyqt_bizforms.forms.form_config_types import (
    FieldValidation, FormFieldConfig, FormFieldType, FormSelectOption,
)
from pyqt_bizforms.forms.widget_dispatcher import WidgetDispatcher
from pyqt_bizforms.forms.widget_factory import FieldWidgetFactory
from pyqt_bizforms.protocols import (
    CheckBoxAdapter, ComboBoxAdapter, DatePickerAdapter, FilePathAdapter, LineEditAdapter,
    NumberEditAdapter, RadioGroupAdapter, TextAreaAdapter, ValueGettable,
)
from pyqt_bizforms.protocols import widget_adapters
from pyqt_bizforms.protocols.widget_adapters import parse_number, to_qdate

OPTIONS = [FormSelectOption("draft", "Draft"), FormSelectOption("paid", "Paid")]


def test_line_edit_adapter(qapp):
    """Test LineEditAdapter get/set."""
    widget = LineEditAdapter()
    widget.set_value("hello")
    assert widget.get_value() == "hello"
    widget.set_value(None)
    assert widget.get_value() == ""


def test_number_edit_adapter(qapp):
    widget = NumberEditAdapter()
    assert widget.get_value() == ""

    widget.set_value(30.0)
    assert widget.text() == "30"
    assert widget.get_value() == 30

    widget.set_value(2.5)
    assert widget.get_value() == 2.5


def test_parse_number():
    assert parse_number(" 3 ") == 3
    assert parse_number("0.25") == 0.25
    assert parse_number("") == ""
    assert parse_number("abc") == ""


def test_combo_box_adapter(qapp):
    widget = ComboBoxAdapter()
    widget.set_options(OPTIONS)
    widget.set_value("paid")
    assert widget.get_value() == "paid"

    widget.set_value("unknown")
    assert widget.get_value() is None

    widget.set_value("draft")
    widget.set_options(OPTIONS + [FormSelectOption("sent", "Sent")])
    assert widget.get_value() == "draft"
    assert widget.count() == 3


def test_radio_group_adapter(qapp):
    widget = RadioGroupAdapter()
    widget.set_options(OPTIONS)
    assert widget.get_value() is None

    widget.set_value("paid")
    assert widget.get_value() == "paid"

    widget.set_value(None)
    assert widget.get_value() is None


def test_radio_group_matches_values_by_text(qapp):
    widget = RadioGroupAdapter()
    widget.set_options([FormSelectOption(1, "One"), FormSelectOption(3, "Three")])

    widget.set_value("3")

    assert widget.get_value() == 3
    assert widget.buttons()[1].isChecked()


def test_check_box_adapter(qapp):
    widget = CheckBoxAdapter()
    widget.set_value(True)
    assert widget.get_value() is True
    widget.set_value(None)
    assert widget.get_value() is False


def test_text_area_adapter_ignores_programmatic_changes(qapp):
    widget = TextAreaAdapter()
    seen = []
    widget.connect_change_signal(seen.append)

    widget.set_value("line one\nline two")

    assert widget.get_value() == "line one\nline two"
    assert seen == []


def test_date_picker_adapter(qapp):
    widget = DatePickerAdapter()
    assert widget.get_value() is None

    widget.set_value("2024-03-05")
    assert widget.get_value() == datetime.date(2024, 3, 5)

    widget.set_value(datetime.datetime(2024, 12, 24, 8, 30))
    assert widget.get_value() == datetime.date(2024, 12, 24)

    widget.set_value(None)
    assert widget.get_value() is None


def test_to_qdate_rejects_garbage():
    assert to_qdate("") is None
    assert to_qdate("not a date") is None


def test_file_path_adapter(qapp):
    widget = FilePathAdapter()
    seen = []
    widget.connect_change_signal(seen.append)

    widget.path_input.setText("/tmp/logo.png")
    widget.path_input.textEdited.emit("/tmp/logo.png")

    assert widget.get_value() == "/tmp/logo.png"
    assert seen == ["/tmp/logo.png"]


def test_file_path_browse_sets_chosen_path(qapp, monkeypatch):
    class _Dialog:
        @staticmethod
        def getOpenFileName(parent, caption, directory, file_filter):
            return "/tmp/report.csv", file_filter

    monkeypatch.setattr(widget_adapters, "QFileDialog", _Dialog)
    widget = FilePathAdapter()
    seen = []
    widget.connect_change_signal(seen.append)

    widget.browse_button.click()

    assert widget.get_value() == "/tmp/report.csv"
    assert seen == ["/tmp/report.csv"]


def test_dispatcher_fails_loud_for_plain_widgets(qapp):
    with pytest.raises(TypeError, match="ValueGettable"):
        WidgetDispatcher.get_value(QLabel("x"))
    with pytest.raises(TypeError, match="OptionSelectable"):
        WidgetDispatcher.set_options(LineEditAdapter(), OPTIONS)


# ========== FACTORY ==========

@pytest.mark.parametrize("field_type, widget_class", [
    (FormFieldType.TEXT, LineEditAdapter),
    (FormFieldType.EMAIL, LineEditAdapter),
    (FormFieldType.DATE, LineEditAdapter),
    (FormFieldType.NUMBER, NumberEditAdapter),
    (FormFieldType.TEXTAREA, TextAreaAdapter),
    (FormFieldType.SELECT, ComboBoxAdapter),
    (FormFieldType.CHECKBOX, CheckBoxAdapter),
    (FormFieldType.RADIO, RadioGroupAdapter),
    (FormFieldType.DATEPICKER, DatePickerAdapter),
    (FormFieldType.FILE, FilePathAdapter),
])
def test_factory_widget_per_type(qapp, field_type, widget_class):
    widget = FieldWidgetFactory().create(FormFieldConfig(name="f", label="F", type=field_type))
    assert isinstance(widget, widget_class)
    assert isinstance(widget, ValueGettable)
    assert widget.objectName() == "f"


def test_factory_password_is_masked(qapp):
    widget = FieldWidgetFactory().create(FormFieldConfig(name="pw", label="Password", type="password"))
    assert widget.echoMode() == QLineEdit.EchoMode.Password


def test_factory_unknown_type_lenient_and_strict(qapp):
    field = FormFieldConfig(name="tint", label="Tint", type="color")

    assert isinstance(FieldWidgetFactory().create(field), LineEditAdapter)
    with pytest.raises(UnknownFieldTypeError) as excinfo:
        FieldWidgetFactory(strict=True).create(field)
    assert excinfo.value.field_type == "color"


def test_factory_applies_hints(qapp):
    factory = FieldWidgetFactory()

    code = factory.create(FormFieldConfig(name="code", label="Code", placeholder="SAVE10",
                                          validation=FieldValidation(max_length=12),
                                          description="Shown at checkout"))
    assert code.placeholderText() == "SAVE10"
    assert code.maxLength() == 12
    assert code.toolTip() == "Shown at checkout"

    total = factory.create(FormFieldConfig(name="total", label="Total", type=FormFieldType.NUMBER,
                                           readonly=True))
    assert total.isReadOnly()

    status = factory.create(FormFieldConfig(name="status", label="Status", type=FormFieldType.SELECT,
                                            options=OPTIONS, disabled=True, required=True))
    assert status.count() == 2
    assert not status.isEnabled()
    assert status.property("required") is True

    flag = factory.create(FormFieldConfig(name="flag", label="Flag", type=FormFieldType.CHECKBOX, readonly=True))
    assert not flag.isEnabled()
