"""
Widget protocol definitions, adapters and backend contracts.

ABC-based widget contracts that eliminate duck typing in favor of
explicit, fail-loud inheritance-based architecture, plus the table client
protocol and the global application config.
"""

from .widget_protocols import (
    ValueGettable,
    ValueSettable,
    PlaceholderCapable,
    RangeConfigurable,
    OptionSelectable,
    ChangeSignalEmitter,
)
from .widget_adapters import (
    LineEditAdapter,
    NumberEditAdapter,
    TextAreaAdapter,
    ComboBoxAdapter,
    CheckBoxAdapter,
    RadioGroupAdapter,
    DatePickerAdapter,
    FilePathAdapter,
    PyQtWidgetMeta,
)
from .app_config import BizFormsConfig, set_app_config, get_app_config
from .table_client import NO_ROWS_CODE, QueryError, QueryResult, TableClient, TableQuery

__all__ = [
    "ValueGettable",
    "ValueSettable",
    "PlaceholderCapable",
    "RangeConfigurable",
    "OptionSelectable",
    "ChangeSignalEmitter",
    "LineEditAdapter",
    "NumberEditAdapter",
    "TextAreaAdapter",
    "ComboBoxAdapter",
    "CheckBoxAdapter",
    "RadioGroupAdapter",
    "DatePickerAdapter",
    "FilePathAdapter",
    "PyQtWidgetMeta",
    "BizFormsConfig",
    "set_app_config",
    "get_app_config",
    "NO_ROWS_CODE",
    "QueryError",
    "QueryResult",
    "TableClient",
    "TableQuery",
]
