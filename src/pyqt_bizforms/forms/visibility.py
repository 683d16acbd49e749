"""Conditional visibility of fields."""

from typing import Any, Iterable, List, Mapping, Set

from .form_config_types import FormConfig, FormFieldConfig


def is_field_visible(field: FormFieldConfig, values: Mapping[str, Any]) -> bool:
    """
    Evaluate a field's condition against the value of its dependency.

    A field without ``condition`` is always visible. A field with a condition
    but no ``depends_on`` has its predicate called with None.
    """
    if field.condition is None:
        return True
    dependency_value = values.get(field.depends_on) if field.depends_on else None
    return bool(field.condition(dependency_value))


def visible_fields(fields: Iterable[FormFieldConfig], values: Mapping[str, Any]) -> List[FormFieldConfig]:
    return [f for f in fields if is_field_visible(f, values)]


def hidden_field_names(config: FormConfig, values: Mapping[str, Any]) -> Set[str]:
    """Names of fields whose condition currently fails.

    A name declared twice counts as hidden only if its last declaration is hidden.
    """
    hidden = set()
    for f in config.iter_fields():
        if is_field_visible(f, values):
            hidden.discard(f.name)
        else:
            hidden.add(f.name)
    return hidden
