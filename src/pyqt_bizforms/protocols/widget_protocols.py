"""
Widget ABC contracts for form controls.

Every control the field interpreter creates implements the capabilities it
supports explicitly, so the dispatcher can fail loud instead of probing for
``text()`` vs ``value()`` vs ``currentData()``.

Design Philosophy:
- Explicit inheritance over duck typing
- Fail-loud over fail-silent
- Multiple inheritance for composable capabilities
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence


class ValueGettable(ABC):
    """
    ABC for widgets that can return a value.

    All input widgets must implement this to participate in form state.
    """

    @abstractmethod
    def get_value(self) -> Any:
        """
        Get the current value from the widget.

        Returns:
            The widget's current value in form-state representation
            ("" for empty text/number inputs, None for an empty choice).
        """
        pass


class ValueSettable(ABC):
    """
    ABC for widgets that can accept a value.

    Used when state changes originate outside the widget (patches, resets).
    """

    @abstractmethod
    def set_value(self, value: Any) -> None:
        """
        Set the widget's value.

        Args:
            value: The value to set. None clears the widget.
        """
        pass


class PlaceholderCapable(ABC):
    """ABC for widgets that can display placeholder text."""

    @abstractmethod
    def set_placeholder(self, text: str) -> None:
        pass


class RangeConfigurable(ABC):
    """
    ABC for widgets that accept min/max constraints.

    Implemented by numeric edits and date pickers. Bounds are hints: the
    interpreter never rejects a submit because of them.
    """

    @abstractmethod
    def configure_range(self, minimum: Any, maximum: Any, step: Any = None) -> None:
        """
        Configure the allowed range.

        Args:
            minimum: Lower bound or None
            maximum: Upper bound or None
            step: Optional increment (numeric widgets only)
        """
        pass


class OptionSelectable(ABC):
    """ABC for widgets that choose among FormSelectOption entries."""

    @abstractmethod
    def set_options(self, options: Sequence[Any]) -> None:
        """
        Replace the available options.

        Args:
            options: FormSelectOption instances, in display order
        """
        pass


class ChangeSignalEmitter(ABC):
    """
    ABC for widgets that emit change signals.

    Hides the per-widget signal names (textChanged, currentIndexChanged,
    toggled, idClicked) behind one contract.
    """

    @abstractmethod
    def connect_change_signal(self, callback: Callable[[Any], None]) -> None:
        """
        Connect callback to the widget's user-change signal.

        Args:
            callback: Called with the new value (same representation as get_value()).
        """
        pass
