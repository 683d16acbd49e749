"""
UniversalForm: renders a FormConfig as a PyQt6 widget.

One control per field (built by FieldWidgetFactory), laid out in a grid per
section. Every control change goes through the form's FormController, so
the committed value, the on_change patch and the visibility update happen
in one step; the widgets of patched fields are then refreshed with their
signals blocked.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QFrame, QGridLayout, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget,
)

from pyqt_bizforms.core.background_task import BackgroundTaskManager, call_maybe_async
from pyqt_bizforms.services.signal_service import SignalService

from .form_config_types import FormConfig, FormFieldConfig, FormSection
from .form_controller import FormController
from .layout_constants import CURRENT_LAYOUT, FormLayoutConfig
from .validation import FORM_ERROR_KEY
from .visibility import is_field_visible
from .widget_dispatcher import WidgetDispatcher
from .widget_factory import FieldWidgetFactory

logger = logging.getLogger(__name__)


@dataclass
class _FieldCell:
    """Label, control and error line of one declared field."""
    section_index: int
    field: FormFieldConfig
    container: QWidget
    control: QWidget
    error_label: QLabel


class UniversalForm(QWidget):
    """
    Configuration-driven form widget.

    Args:
        config: The form to render
        initial_data: Stored row to edit; field defaults apply only without it
        on_submit: Handler receiving the payload (plain or coroutine function)
        on_cancel: Shows a cancel button when given
        strict: Fail on unknown field types instead of rendering them as text
        run_submit_in_background: Run on_submit on a BackgroundTask
        layout_config: Spacing constants

    Signals:
        parameter_changed(name, value): a field changed, by edit or patch
        submitted(payload): on_submit returned (or no handler was given)
        submit_failed(exception): on_submit raised
        validation_failed(errors): schema validation blocked the submit
        cancelled(): cancel button pressed
    """

    parameter_changed = pyqtSignal(str, object)
    submitted = pyqtSignal(dict)
    submit_failed = pyqtSignal(Exception)
    validation_failed = pyqtSignal(dict)
    cancelled = pyqtSignal()

    def __init__(
        self,
        config: FormConfig,
        initial_data: Optional[Mapping[str, Any]] = None,
        on_submit: Optional[Callable[[Dict[str, Any]], Any]] = None,
        on_cancel: Optional[Callable[[], None]] = None,
        strict: bool = False,
        run_submit_in_background: bool = False,
        layout_config: FormLayoutConfig = CURRENT_LAYOUT,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.config = config
        self.controller = FormController(config, initial_data)
        self.on_submit = on_submit
        self.on_cancel = on_cancel
        self.run_submit_in_background = run_submit_in_background
        self.layout_config = layout_config
        self._factory = FieldWidgetFactory(strict=strict)
        self._task_manager = BackgroundTaskManager()
        self._loading = False

        self._cells: List[_FieldCell] = []
        self._section_grids: List[QGridLayout] = []
        # Last declaration wins, as in form state
        self.widgets: Dict[str, QWidget] = {}
        self.title_label: Optional[QLabel] = None
        self.form_error_label: Optional[QLabel] = None
        self.submit_button: Optional[QPushButton] = None
        self.cancel_button: Optional[QPushButton] = None

        self.setup_ui()
        self.refresh_widgets_from_state()
        self._relayout_sections()

    # ==================== WIDGET CREATION ====================

    def setup_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(self.layout_config.main_layout_spacing)
        layout.setContentsMargins(*self.layout_config.main_layout_margins)

        if self.config.show_card:
            card = QFrame(self)
            card.setObjectName("form_card")
            card.setFrameShape(QFrame.Shape.StyledPanel)
            card_layout = QVBoxLayout(card)
            card_layout.setSpacing(self.layout_config.card_spacing)
            card_layout.setContentsMargins(*self.layout_config.card_margins)
            self._add_header(card_layout)
            card_layout.addWidget(self.build_form())
            layout.addWidget(card)
        else:
            layout.addWidget(self.build_form())

    def _add_header(self, layout: QVBoxLayout) -> None:
        self.title_label = QLabel(self.config.title)
        font = self.title_label.font()
        font.setPointSize(font.pointSize() + self.layout_config.title_point_size_delta)
        font.setBold(True)
        self.title_label.setFont(font)
        layout.addWidget(self.title_label)
        if self.config.description:
            layout.addWidget(self._muted_label(self.config.description))

    def build_form(self) -> QWidget:
        content = QWidget()
        content_layout = QVBoxLayout(content)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(self.layout_config.section_spacing)

        for index, section in enumerate(self.config.sections):
            content_layout.addWidget(self._build_section(index, section))

        self.form_error_label = self._error_label()
        content_layout.addWidget(self.form_error_label)
        content_layout.addLayout(self._build_buttons())
        return content

    def _build_section(self, index: int, section: FormSection) -> QWidget:
        section_widget = QWidget()
        section_widget.setObjectName(f"section_{index}")
        section_layout = QVBoxLayout(section_widget)
        section_layout.setContentsMargins(0, 0, 0, 0)

        if section.title:
            title = QLabel(section.title)
            font = title.font()
            font.setBold(True)
            title.setFont(font)
            section_layout.addWidget(title)
            if section.description:
                section_layout.addWidget(self._muted_label(section.description))

        grid = QGridLayout()
        grid.setHorizontalSpacing(self.layout_config.grid_horizontal_spacing)
        grid.setVerticalSpacing(self.layout_config.grid_vertical_spacing)
        section_layout.addLayout(grid)
        self._section_grids.append(grid)

        for field in section.fields:
            self._cells.append(self._build_cell(index, field, section_widget))
        return section_widget

    def _build_cell(self, section_index: int, field: FormFieldConfig, parent: QWidget) -> _FieldCell:
        container = QWidget(parent)
        container.setObjectName(f"field_{field.name}")
        cell_layout = QVBoxLayout(container)
        cell_layout.setContentsMargins(0, 0, 0, 0)
        cell_layout.setSpacing(self.layout_config.field_spacing)

        label = QLabel(f"{field.label} *" if field.required else field.label)
        control = self._factory.create(field)
        label.setBuddy(control)
        cell_layout.addWidget(label)
        cell_layout.addWidget(control)
        if field.description:
            cell_layout.addWidget(self._muted_label(field.description))
        error_label = self._error_label()
        cell_layout.addWidget(error_label)

        WidgetDispatcher.connect_change_signal(control, self._make_change_handler(field.name))
        self.widgets[field.name] = control
        return _FieldCell(section_index, field, container, control, error_label)

    def _build_buttons(self) -> QHBoxLayout:
        row = QHBoxLayout()
        row.setSpacing(self.layout_config.button_spacing)
        self.submit_button = QPushButton(self.config.submit_label)
        self.submit_button.setMinimumWidth(self.layout_config.button_min_width)
        self.submit_button.setDefault(True)
        self.submit_button.clicked.connect(self.submit)
        row.addWidget(self.submit_button, 1)

        if self.on_cancel is not None or self.config.cancel_label:
            self.cancel_button = QPushButton(self.config.cancel_label or "Cancel")
            self.cancel_button.setMinimumWidth(self.layout_config.button_min_width)
            self.cancel_button.clicked.connect(self.cancel)
            row.addWidget(self.cancel_button, 1)
        return row

    def _muted_label(self, text: str) -> QLabel:
        label = QLabel(text)
        label.setWordWrap(True)
        label.setStyleSheet(f"color: {self.layout_config.muted_color};")
        return label

    def _error_label(self) -> QLabel:
        label = QLabel()
        label.setWordWrap(True)
        label.setStyleSheet(f"color: {self.layout_config.error_color};")
        label.setVisible(False)
        return label

    # ==================== CHANGE HANDLING ====================

    def _make_change_handler(self, name: str) -> Callable[[Any], None]:
        def _on_change(value: Any) -> None:
            self.update_parameter(name, value)
        return _on_change

    def update_parameter(self, name: str, value: Any) -> None:
        """Dispatch one edit and sync every affected widget."""
        result = self.controller.set_value(name, value)
        if result.blocked:
            return

        self._set_field_error(name, None)
        for changed_name, changed_value in result.values.items():
            # The edited control already shows its value unless the patch overwrote it
            if changed_name != name or changed_value != value:
                self._refresh_widget(changed_name)
        if result.visibility_changed:
            logger.debug(f"Visibility changed: shown={sorted(result.shown)} hidden={sorted(result.hidden)}")
            self._relayout_sections()
        for changed_name, changed_value in result.values.items():
            self.parameter_changed.emit(changed_name, changed_value)

    def _refresh_widget(self, name: str) -> None:
        for cell in self._cells:
            if cell.field.name == name:
                with SignalService.block_signals(cell.control):
                    WidgetDispatcher.set_value(cell.control, self.controller.state.display_value(cell.field))

    def refresh_widgets_from_state(self) -> None:
        """Push every state value (or its default) into its controls."""
        for cell in self._cells:
            with SignalService.block_signals(cell.control):
                WidgetDispatcher.set_value(cell.control, self.controller.state.display_value(cell.field))

    def _relayout_sections(self) -> None:
        """Place visible cells in their section grids, hiding the rest."""
        values = self.controller.state.values
        for index, grid in enumerate(self._section_grids):
            columns = self.config.sections[index].column_count
            cells = [c for c in self._cells if c.section_index == index]
            for cell in cells:
                grid.removeWidget(cell.container)

            row, column = 0, 0
            for cell in cells:
                visible = is_field_visible(cell.field, values)
                cell.container.setHidden(not visible)
                if not visible:
                    continue
                span = min(cell.field.column_span, columns)
                if column + span > columns:
                    row, column = row + 1, 0
                grid.addWidget(cell.container, row, column, 1, span, Qt.AlignmentFlag.AlignTop)
                column += span
                if column >= columns:
                    row, column = row + 1, 0

    def is_field_rendered(self, name: str) -> bool:
        """True if some declaration of name is currently laid out."""
        return any(c.field.name == name and not c.container.isHidden() for c in self._cells)

    def rendered_field_names(self) -> List[str]:
        return [c.field.name for c in self._cells if not c.container.isHidden()]

    # ==================== OPTIONS / STATE ====================

    def set_field_options(self, name: str, options: Sequence[Any]) -> None:
        """Replace a choice field's options at runtime (e.g. loaded customers)."""
        cells = [c for c in self._cells if c.field.name == name]
        if not cells:
            raise KeyError(f"No field named '{name}' in form '{self.config.title}'")
        for cell in cells:
            with SignalService.block_signals(cell.control):
                WidgetDispatcher.set_options(cell.control, options)
                WidgetDispatcher.set_value(cell.control, self.controller.state.display_value(cell.field))

    def values(self) -> Dict[str, Any]:
        return self.controller.values()

    def reset(self, initial_data: Optional[Mapping[str, Any]] = None) -> None:
        """Reseed state (defaults, or exactly initial_data) and redraw every control."""
        self.controller.reset(initial_data)
        self.refresh_widgets_from_state()
        self._relayout_sections()
        self.show_errors({})

    def set_loading(self, loading: bool) -> None:
        """Disable the submit button while the caller is busy."""
        self._loading = loading
        if self.submit_button is not None:
            self.submit_button.setEnabled(not loading)

    # ==================== ERRORS ====================

    def _set_field_error(self, name: str, message: Optional[str]) -> None:
        for cell in self._cells:
            if cell.field.name == name:
                cell.error_label.setText(message or "")
                cell.error_label.setVisible(bool(message))

    def show_errors(self, errors: Mapping[str, str]) -> None:
        """Show one message beside each failing control; unknown keys go to the form line."""
        for cell in self._cells:
            message = errors.get(cell.field.name)
            cell.error_label.setText(message or "")
            cell.error_label.setVisible(bool(message))

        field_names = {c.field.name for c in self._cells}
        extra = [msg for key, msg in errors.items() if key not in field_names or key == FORM_ERROR_KEY]
        if self.form_error_label is not None:
            self.form_error_label.setText("\n".join(extra))
            self.form_error_label.setVisible(bool(extra))

    def error_text(self, name: str) -> str:
        for cell in self._cells:
            if cell.field.name == name:
                return cell.error_label.text()
        return ""

    # ==================== SUBMIT / CANCEL ====================

    def submit(self) -> bool:
        """
        Validate and hand the payload to on_submit.

        Returns:
            False if validation blocked the submit or a synchronous handler
            raised; True otherwise (including when the handler was started
            in the background).
        """
        if self._loading or self.controller.is_submitting:
            logger.debug(f"Submit of '{self.config.title}' ignored, already busy")
            return False

        result = self.controller.prepare_submission()
        self.show_errors(result.errors)
        if not result.ok:
            self.validation_failed.emit(dict(result.errors))
            return False

        payload = result.payload
        if self.on_submit is None:
            self.submitted.emit(payload)
            return True

        self.controller.begin_submit()
        if self.run_submit_in_background:
            self._task_manager.run(
                target=self.on_submit,
                args=(payload,),
                button=self.submit_button,
                busy_text="Submitting...",
                on_finished=self.controller.finish_submit,
                on_success=lambda _result: self._on_submit_succeeded(payload),
                on_error=self._on_submit_error,
            )
            return True

        try:
            call_maybe_async(self.on_submit, payload)
        except Exception as e:
            self._on_submit_error(e)
            return False
        self._on_submit_succeeded(payload)
        return True

    def _on_submit_succeeded(self, payload: Dict[str, Any]) -> None:
        self.controller.finish_submit()
        self.submitted.emit(payload)

    def _on_submit_error(self, error: Exception) -> None:
        self.controller.finish_submit()
        logger.error(f"Submit handler of '{self.config.title}' failed: {error}", exc_info=error)
        self.submit_failed.emit(error)

    def cancel(self) -> None:
        if self.on_cancel is not None:
            self.on_cancel()
        self.cancelled.emit()

    def closeEvent(self, event):
        self._task_manager.cleanup()
        super().closeEvent(event)
