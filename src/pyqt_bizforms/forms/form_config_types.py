"""
Declarative form configuration.

A FormConfig is plain data: sections of fields, each with a type from a
closed set, optional validation hints, choice options and two behavioral
hooks (``condition`` for visibility, ``on_change`` for cross-field patches).
The interpreter reads it at build time; nothing here touches Qt.

Example:
    config = FormConfig(
        title="Purchase Information",
        submit_label="Save Purchase",
        sections=[FormSection(title="Details", fields=[
            FormFieldConfig(name="quantity", label="Quantity", type=FormFieldType.NUMBER,
                            on_change=lambda v, data: {"total_amount": (v or 0) * (data.get("unit_price") or 0)}),
        ])],
    )
"""

import dataclasses
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Type, Union

logger = logging.getLogger(__name__)

# on_change(new_value, snapshot_including_new_value) -> patch or None
PatchFunction = Callable[[Any, Dict[str, Any]], Optional[Mapping[str, Any]]]
Condition = Callable[[Any], bool]


class FormFieldType(str, Enum):
    """Closed set of input kinds the interpreter can render."""
    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    DATE = "date"
    DATETIME_LOCAL = "datetime-local"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATEPICKER = "datepicker"
    FILE = "file"

    @classmethod
    def parse(cls, value: Union["FormFieldType", str]) -> Optional["FormFieldType"]:
        """Return the member for value, or None if it is not a known type."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


# Rendered as a single-line edit
TEXT_LIKE_TYPES = frozenset({
    FormFieldType.TEXT, FormFieldType.EMAIL, FormFieldType.PASSWORD, FormFieldType.TEL,
    FormFieldType.URL, FormFieldType.DATE, FormFieldType.DATETIME_LOCAL,
})

CHOICE_TYPES = frozenset({FormFieldType.SELECT, FormFieldType.RADIO})


class RecomputeMode(Enum):
    """How far an on_change patch propagates.

    SINGLE_HOP: only the edited field's patch is applied; patched fields do
        not run their own on_change.
    CASCADE: patched fields run their on_change too, in dependency order
        derived from ``affects``, each at most once per edit.
    """
    SINGLE_HOP = "single_hop"
    CASCADE = "cascade"


@dataclass(frozen=True)
class FormSelectOption:
    value: Union[str, int, float, bool]
    label: str
    disabled: bool = False


@dataclass(frozen=True)
class FieldValidation:
    """Native input hints. Only schema mode enforces anything on submit."""
    min: Optional[Union[float, str]] = None
    max: Optional[Union[float, str]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    step: Optional[float] = None


_COL_SPAN_RE = re.compile(r"col-span-(\d+)")
_GRID_COLS_RE = re.compile(r"grid-cols-(\d+)")


@dataclass
class FormFieldConfig:
    """One field of a form.

    ``default_value`` may be a zero-argument callable; it is called each time
    form state is seeded (e.g. ``date.today``).
    """
    name: str
    label: str
    type: Union[FormFieldType, str] = FormFieldType.TEXT
    placeholder: Optional[str] = None
    required: bool = False
    disabled: bool = False
    readonly: bool = False
    validation: Optional[FieldValidation] = None
    options: List[FormSelectOption] = field(default_factory=list)
    depends_on: Optional[str] = None
    condition: Optional[Condition] = None
    grid_column: Optional[str] = None
    description: Optional[str] = None
    default_value: Any = None
    on_change: Optional[PatchFunction] = None
    affects: Tuple[str, ...] = ()

    @property
    def field_type(self) -> Optional[FormFieldType]:
        return FormFieldType.parse(self.type)

    @property
    def column_span(self) -> int:
        """Grid columns this field spans ("md:col-span-2" -> 2)."""
        if not self.grid_column:
            return 1
        spans = _COL_SPAN_RE.findall(self.grid_column)
        return max(int(s) for s in spans) if spans else 1

    def resolve_default(self) -> Any:
        if callable(self.default_value):
            return self.default_value()
        return self.default_value


@dataclass
class FormSection:
    fields: List[FormFieldConfig] = field(default_factory=list)
    title: Optional[str] = None
    description: Optional[str] = None
    grid_columns: Optional[str] = None

    DEFAULT_COLUMNS = 2

    @property
    def column_count(self) -> int:
        """Columns of the section grid ("grid-cols-1 md:grid-cols-3" -> 3)."""
        if not self.grid_columns:
            return self.DEFAULT_COLUMNS
        counts = _GRID_COLS_RE.findall(self.grid_columns)
        return max(int(c) for c in counts) if counts else self.DEFAULT_COLUMNS


@dataclass
class FormConfig:
    title: str
    sections: List[FormSection] = field(default_factory=list)
    submit_label: str = "Submit"
    description: Optional[str] = None
    cancel_label: Optional[str] = None
    show_card: bool = True
    validation_schema: Optional[Type[Any]] = None
    recompute_mode: RecomputeMode = RecomputeMode.SINGLE_HOP

    # ========== LOOKUP ==========

    def iter_fields(self) -> Iterator[FormFieldConfig]:
        """All fields in declaration order, across sections."""
        for section in self.sections:
            yield from section.fields

    def field_names(self) -> List[str]:
        return [f.name for f in self.iter_fields()]

    def get_field(self, name: str) -> Optional[FormFieldConfig]:
        """Last field with this name (later declarations win, as in form state)."""
        found = None
        for f in self.iter_fields():
            if f.name == name:
                found = f
        return found

    def duplicate_field_names(self) -> List[str]:
        counts = Counter(self.field_names())
        return [name for name, count in counts.items() if count > 1]

    # ========== DERIVED CONFIGS ==========

    def with_overrides(self, **changes: Any) -> "FormConfig":
        """Copy with top-level attributes replaced, e.g. edit-mode title and submit label."""
        return dataclasses.replace(self, **changes)

    def with_options(self, field_name: str, options: Sequence[Union[FormSelectOption, Mapping[str, Any]]]) -> "FormConfig":
        """Copy with one choice field's options replaced (options loaded at runtime)."""
        parsed = [_parse_option(o) for o in options]
        sections = []
        found = False
        for section in self.sections:
            fields = []
            for f in section.fields:
                if f.name == field_name:
                    f = dataclasses.replace(f, options=parsed)
                    found = True
                fields.append(f)
            sections.append(dataclasses.replace(section, fields=fields))
        if not found:
            raise KeyError(f"No field named '{field_name}' in form '{self.title}'")
        return dataclasses.replace(self, sections=sections)

    # ========== SERIALIZATION ==========

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form of the declarative attributes.

        Callables (condition, on_change, callable defaults) and the schema
        class are not serializable and are omitted.
        """
        return _drop_none({
            "title": self.title,
            "description": self.description,
            "submit_label": self.submit_label,
            "cancel_label": self.cancel_label,
            "show_card": self.show_card,
            "recompute_mode": self.recompute_mode.value,
            "sections": [_section_to_dict(s) for s in self.sections],
        })

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], validation_schema: Optional[Type[Any]] = None) -> "FormConfig":
        """Build a config from to_dict() output (camelCase keys are accepted too)."""
        data = _normalize_keys(data)
        return cls(
            title=data["title"],
            description=data.get("description"),
            submit_label=data.get("submit_label", "Submit"),
            cancel_label=data.get("cancel_label"),
            show_card=data.get("show_card", True),
            validation_schema=validation_schema,
            recompute_mode=RecomputeMode(data.get("recompute_mode", RecomputeMode.SINGLE_HOP.value)),
            sections=[_section_from_dict(s) for s in data.get("sections", [])],
        )


# ========== SERIALIZATION HELPERS ==========

_KEY_ALIASES = {
    "submitLabel": "submit_label",
    "cancelLabel": "cancel_label",
    "showCard": "show_card",
    "gridColumns": "grid_columns",
    "gridColumn": "grid_column",
    "dependsOn": "depends_on",
    "defaultValue": "default_value",
    "minLength": "min_length",
    "maxLength": "max_length",
    "recomputeMode": "recompute_mode",
}


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def _parse_option(option: Union[FormSelectOption, Mapping[str, Any]]) -> FormSelectOption:
    if isinstance(option, FormSelectOption):
        return option
    return FormSelectOption(value=option["value"], label=option["label"], disabled=option.get("disabled", False))


def _section_to_dict(section: FormSection) -> Dict[str, Any]:
    return _drop_none({
        "title": section.title,
        "description": section.description,
        "grid_columns": section.grid_columns,
        "fields": [_field_to_dict(f) for f in section.fields],
    })


def _field_to_dict(f: FormFieldConfig) -> Dict[str, Any]:
    data = {
        "name": f.name,
        "label": f.label,
        "type": f.type.value if isinstance(f.type, FormFieldType) else f.type,
        "placeholder": f.placeholder,
        "required": f.required or None,
        "disabled": f.disabled or None,
        "readonly": f.readonly or None,
        "validation": _drop_none(dataclasses.asdict(f.validation)) if f.validation else None,
        "options": [_drop_none({"value": o.value, "label": o.label, "disabled": o.disabled or None})
                    for o in f.options] or None,
        "depends_on": f.depends_on,
        "grid_column": f.grid_column,
        "description": f.description,
        "default_value": None if callable(f.default_value) else f.default_value,
        "affects": list(f.affects) or None,
    }
    return _drop_none(data)


def _section_from_dict(data: Mapping[str, Any]) -> FormSection:
    data = _normalize_keys(data)
    return FormSection(
        title=data.get("title"),
        description=data.get("description"),
        grid_columns=data.get("grid_columns"),
        fields=[_field_from_dict(f) for f in data.get("fields", [])],
    )


def _field_from_dict(data: Mapping[str, Any]) -> FormFieldConfig:
    data = _normalize_keys(data)
    raw_type = data.get("type", FormFieldType.TEXT.value)
    validation = data.get("validation")
    return FormFieldConfig(
        name=data["name"],
        label=data.get("label", data["name"]),
        # Unknown type strings are kept verbatim; the interpreter decides how to render them
        type=FormFieldType.parse(raw_type) or raw_type,
        placeholder=data.get("placeholder"),
        required=data.get("required", False),
        disabled=data.get("disabled", False),
        readonly=data.get("readonly", False),
        validation=FieldValidation(**_normalize_keys(validation)) if validation else None,
        options=[_parse_option(o) for o in data.get("options", [])],
        depends_on=data.get("depends_on"),
        grid_column=data.get("grid_column"),
        description=data.get("description"),
        default_value=data.get("default_value"),
        affects=tuple(data.get("affects", ())),
    )
