"""
Widget dispatcher with fail-loud ABC checking.

The form interpreter never probes controls with hasattr(); every call goes
through an isinstance check against the capability ABC and raises TypeError
naming the missing capability.
"""

from typing import Any, Callable, Sequence, Type

from pyqt_bizforms.protocols import (
    ChangeSignalEmitter,
    OptionSelectable,
    PlaceholderCapable,
    RangeConfigurable,
    ValueGettable,
    ValueSettable,
)


def _require(widget: Any, capability: Type, method: str) -> None:
    if not isinstance(widget, capability):
        raise TypeError(
            f"Widget {type(widget).__name__} does not implement {capability.__name__} ABC. "
            f"Add {capability.__name__} to widget's base classes and implement {method}() method."
        )


class WidgetDispatcher:
    """
    ABC-based widget dispatch - NO DUCK TYPING.

    Example:
        value = WidgetDispatcher.get_value(widget)  # Raises TypeError if not ValueGettable
    """

    @staticmethod
    def get_value(widget: Any) -> Any:
        _require(widget, ValueGettable, "get_value")
        return widget.get_value()

    @staticmethod
    def set_value(widget: Any, value: Any) -> None:
        _require(widget, ValueSettable, "set_value")
        widget.set_value(value)

    @staticmethod
    def set_placeholder(widget: Any, text: str) -> None:
        _require(widget, PlaceholderCapable, "set_placeholder")
        widget.set_placeholder(text)

    @staticmethod
    def configure_range(widget: Any, minimum: Any, maximum: Any, step: Any = None) -> None:
        _require(widget, RangeConfigurable, "configure_range")
        widget.configure_range(minimum, maximum, step)

    @staticmethod
    def set_options(widget: Any, options: Sequence[Any]) -> None:
        _require(widget, OptionSelectable, "set_options")
        widget.set_options(options)

    @staticmethod
    def connect_change_signal(widget: Any, callback: Callable[[Any], None]) -> None:
        _require(widget, ChangeSignalEmitter, "connect_change_signal")
        widget.connect_change_signal(callback)
