"""
Widget adapters that wrap Qt widgets to implement the control ABCs.

Normalizes Qt's inconsistent APIs:
- QLineEdit.text() vs QPlainTextEdit.toPlainText() vs QComboBox.currentData()
- QLineEdit.setText() vs QDateEdit.setDate() vs QComboBox.setCurrentIndex()

Values use the form-state representation: text controls return "" when empty,
number controls return int/float or "", choice controls return the selected
option's value or None, date pickers return ``datetime.date`` or None.
"""

import datetime
import logging
from abc import ABCMeta
from typing import Any, Callable, Optional, Sequence, Union

from PyQt6.QtCore import QDate, QObject, QRegularExpression
from PyQt6.QtGui import QDoubleValidator, QRegularExpressionValidator
from PyQt6.QtWidgets import (
    QButtonGroup, QCheckBox, QComboBox, QDateEdit, QFileDialog, QHBoxLayout, QLineEdit,
    QPlainTextEdit, QPushButton, QRadioButton, QVBoxLayout, QWidget,
)

from .widget_protocols import (
    ChangeSignalEmitter, OptionSelectable, PlaceholderCapable,
    RangeConfigurable, ValueGettable, ValueSettable,
)

logger = logging.getLogger(__name__)

# PyQt-specific metaclass that combines ABCMeta with Qt's metaclass
_QtMetaclass = type(QObject)


class PyQtWidgetMeta(_QtMetaclass, ABCMeta):
    """Metaclass for PyQt widgets that need ABC support."""
    pass


def parse_number(text: str) -> Union[int, float, str]:
    """Parse number input text; empty or unparsable text becomes ""."""
    text = text.strip()
    if text == "":
        return ""
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return ""


def to_qdate(value: Any) -> Optional[QDate]:
    """Convert a date, datetime or ISO string to QDate."""
    if value is None or value == "":
        return None
    if isinstance(value, QDate):
        return value
    if isinstance(value, datetime.datetime):
        value = value.date()
    if isinstance(value, datetime.date):
        return QDate(value.year, value.month, value.day)
    qdate = QDate.fromString(str(value)[:10], "yyyy-MM-dd")
    return qdate if qdate.isValid() else None


class LineEditAdapter(QLineEdit, ValueGettable, ValueSettable, PlaceholderCapable,
                      ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Single-line control for every text-like field type.

    - .text() → .get_value()
    - .setText() → .set_value()
    - .textEdited → .connect_change_signal() (user edits only)
    """

    _widget_id = "line_edit"

    def get_value(self) -> Any:
        return self.text()

    def set_value(self, value: Any) -> None:
        self.setText("" if value is None else str(value))

    def set_placeholder(self, text: str) -> None:
        self.setPlaceholderText(text)

    def set_pattern(self, pattern: str) -> None:
        """Restrict input to a regular expression (native hint, not enforced on submit)."""
        self.setValidator(QRegularExpressionValidator(QRegularExpression(pattern), self))

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self.textEdited.connect(lambda _text: callback(self.get_value()))


class NumberEditAdapter(QLineEdit, ValueGettable, ValueSettable, PlaceholderCapable,
                        RangeConfigurable, ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Numeric line edit.

    Empty input is "" rather than 0 so that a cleared field stays cleared;
    arithmetic consumers treat "" as 0 themselves.
    """

    _widget_id = "number_edit"

    def __init__(self, parent=None):
        super().__init__(parent)
        self._validator = QDoubleValidator(self)
        self._validator.setNotation(QDoubleValidator.Notation.StandardNotation)
        self.setValidator(self._validator)

    def get_value(self) -> Any:
        return parse_number(self.text())

    def set_value(self, value: Any) -> None:
        if value is None or value == "":
            self.setText("")
        elif isinstance(value, float) and value.is_integer():
            self.setText(str(int(value)) if abs(value) < 1e15 else str(value))
        else:
            self.setText(str(value))

    def set_placeholder(self, text: str) -> None:
        self.setPlaceholderText(text)

    def configure_range(self, minimum: Any, maximum: Any, step: Any = None) -> None:
        if minimum is not None:
            self._validator.setBottom(float(minimum))
        if maximum is not None:
            self._validator.setTop(float(maximum))
        if step is not None:
            decimals = 0 if float(step).is_integer() else len(str(step).split(".")[-1])
            self._validator.setDecimals(decimals)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self.textEdited.connect(lambda _text: callback(self.get_value()))


class TextAreaAdapter(QPlainTextEdit, ValueGettable, ValueSettable, PlaceholderCapable,
                      ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """Multi-line text control."""

    _widget_id = "text_area"

    def __init__(self, parent=None):
        super().__init__(parent)
        self._programmatic = False

    def get_value(self) -> Any:
        return self.toPlainText()

    def set_value(self, value: Any) -> None:
        text = "" if value is None else str(value)
        if text == self.toPlainText():
            return
        self._programmatic = True
        try:
            self.setPlainText(text)
        finally:
            self._programmatic = False

    def set_placeholder(self, text: str) -> None:
        self.setPlaceholderText(text)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        # textChanged also fires for setPlainText(); skip programmatic updates
        def _on_changed():
            if not self._programmatic:
                callback(self.get_value())
        self.textChanged.connect(_on_changed)


class ComboBoxAdapter(QComboBox, ValueGettable, ValueSettable, PlaceholderCapable,
                      OptionSelectable, ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Single-choice control for ``select`` fields.

    Stores option values in itemData, not just display text. Disabled options
    are listed but cannot be chosen.
    """

    _widget_id = "combo_box"

    def get_value(self) -> Any:
        if self.currentIndex() < 0:
            return None
        return self.itemData(self.currentIndex())

    def set_value(self, value: Any) -> None:
        for i in range(self.count()):
            if self.itemData(i) == value or (value is not None and str(self.itemData(i)) == str(value)):
                self.setCurrentIndex(i)
                return
        # Value not found - clear selection
        self.setCurrentIndex(-1)

    def set_placeholder(self, text: str) -> None:
        self.setPlaceholderText(text)

    def set_options(self, options: Sequence[Any]) -> None:
        current = self.get_value()
        self.clear()
        for option in options:
            self.addItem(option.label, option.value)
            if option.disabled:
                item = self.model().item(self.count() - 1)
                item.setEnabled(False)
        self.set_value(current)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self.activated.connect(lambda _index: callback(self.get_value()))


class CheckBoxAdapter(QCheckBox, ValueGettable, ValueSettable, ChangeSignalEmitter,
                      metaclass=PyQtWidgetMeta):
    """Boolean toggle for ``checkbox`` fields."""

    _widget_id = "check_box"

    def get_value(self) -> Any:
        return self.isChecked()

    def set_value(self, value: Any) -> None:
        self.setChecked(bool(value))

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self.clicked.connect(lambda checked: callback(bool(checked)))


class RadioGroupAdapter(QWidget, ValueGettable, ValueSettable, OptionSelectable,
                        ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """One radio button per option; the group value is the checked option's value."""

    _widget_id = "radio_group"

    def __init__(self, parent=None):
        super().__init__(parent)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._group = QButtonGroup(self)
        self._values: list = []

    def set_options(self, options: Sequence[Any]) -> None:
        current = self.get_value()
        for button in self._group.buttons():
            self._group.removeButton(button)
            button.deleteLater()
        self._values = []
        for index, option in enumerate(options):
            button = QRadioButton(option.label, self)
            button.setEnabled(not option.disabled)
            self._group.addButton(button, index)
            self._layout.addWidget(button)
            self._values.append(option.value)
        self.set_value(current)

    def buttons(self) -> list:
        return self._group.buttons()

    def get_value(self) -> Any:
        checked_id = self._group.checkedId()
        if checked_id < 0:
            return None
        return self._values[checked_id]

    def set_value(self, value: Any) -> None:
        target = -1
        for index, option_value in enumerate(self._values):
            if option_value == value or (value is not None and str(option_value) == str(value)):
                target = index
                break
        # An exclusive group cannot be fully unchecked
        self._group.setExclusive(False)
        for button in self._group.buttons():
            button.setChecked(self._group.id(button) == target)
        self._group.setExclusive(True)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self._group.idClicked.connect(lambda button_id: callback(self._values[button_id]))


class DatePickerAdapter(QDateEdit, ValueGettable, ValueSettable, PlaceholderCapable,
                        RangeConfigurable, ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """
    Calendar-popup date control for ``datepicker`` fields.

    Handles None like the spinbox adapters of Qt forms usually do: the day
    before the allowed minimum is reserved as the "no date" value and shows
    the placeholder as special value text.
    """

    _widget_id = "date_picker"

    DEFAULT_MINIMUM = QDate(1900, 1, 1)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setCalendarPopup(True)
        self.setDisplayFormat("yyyy-MM-dd")
        self.setMinimumDate(self.DEFAULT_MINIMUM.addDays(-1))
        self.setSpecialValueText("Pick a date")
        self.setDate(self.minimumDate())

    def get_value(self) -> Any:
        if self.date() == self.minimumDate():
            return None
        return self.date().toPyDate()

    def set_value(self, value: Any) -> None:
        qdate = to_qdate(value)
        self.setDate(qdate if qdate is not None else self.minimumDate())

    def set_placeholder(self, text: str) -> None:
        self.setSpecialValueText(text)

    def configure_range(self, minimum: Any, maximum: Any, step: Any = None) -> None:
        current = self.get_value()
        lower = to_qdate(minimum) or self.DEFAULT_MINIMUM
        self.setMinimumDate(lower.addDays(-1))
        upper = to_qdate(maximum)
        if upper is not None:
            self.setMaximumDate(upper)
        self.set_value(current)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self.dateChanged.connect(lambda _date: callback(self.get_value()))


class FilePathAdapter(QWidget, ValueGettable, ValueSettable, PlaceholderCapable,
                      ChangeSignalEmitter, metaclass=PyQtWidgetMeta):
    """Path line edit plus browse button for ``file`` fields."""

    _widget_id = "file_path"

    def __init__(self, parent=None, file_filter: str = "All Files (*)"):
        super().__init__(parent)
        self.file_filter = file_filter
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.path_input = QLineEdit(self)
        self.browse_button = QPushButton("Browse...", self)
        self.browse_button.setMaximumWidth(80)
        layout.addWidget(self.path_input, 1)
        layout.addWidget(self.browse_button)
        self._callbacks: list = []
        self.path_input.textEdited.connect(lambda _text: self._emit())
        self.browse_button.clicked.connect(self._browse)

    def _browse(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Select File", self.path_input.text(), self.file_filter)
        if path:
            self.path_input.setText(path)
            self._emit()

    def _emit(self) -> None:
        for callback in self._callbacks:
            callback(self.get_value())

    def get_value(self) -> Any:
        return self.path_input.text()

    def set_value(self, value: Any) -> None:
        self.path_input.setText("" if value is None else str(value))

    def set_placeholder(self, text: str) -> None:
        self.path_input.setPlaceholderText(text)

    def setReadOnly(self, read_only: bool) -> None:
        self.path_input.setReadOnly(read_only)
        self.browse_button.setEnabled(not read_only)

    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        self._callbacks.append(callback)
