"""Form state: the single mutable mapping behind a form."""

import logging
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

from .form_config_types import FormConfig, FormFieldConfig, FormSection
from .visibility import hidden_field_names, visible_fields

logger = logging.getLogger(__name__)


class FormState:
    """
    Field name -> current value for one form instance.

    Create mode (no ``initial_data``) seeds field defaults. Edit mode seeds
    exactly ``initial_data``: defaults are then only a display fallback
    (see display_value), so submitting an untouched form returns the
    stored row unchanged, including keys that match no field.

    Only the change dispatcher and reset() mutate values; renderers read.
    """

    def __init__(self, config: FormConfig, initial_data: Optional[Mapping[str, Any]] = None):
        self.config = config
        self.values: Dict[str, Any] = {}
        self.reset(initial_data)

    def reset(self, initial_data: Optional[Mapping[str, Any]] = None) -> None:
        duplicates = self.config.duplicate_field_names()
        if duplicates:
            logger.warning(f"Form '{self.config.title}' declares duplicate field names {duplicates}; "
                           f"later fields share state with earlier ones")

        if initial_data:
            values = dict(initial_data)
        else:
            values = {}
            for f in self.config.iter_fields():
                default = f.resolve_default()
                if default is not None:
                    values[f.name] = default
        self.values = values
        logger.debug(f"Seeded state for '{self.config.title}' with {len(values)} values")

    # ========== READ ==========

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def display_value(self, field: FormFieldConfig) -> Any:
        """Value a control shows: the state value, else the field's default."""
        if field.name in self.values:
            return self.values[field.name]
        return field.resolve_default()

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy safe to hand to user callbacks."""
        return dict(self.values)

    def is_visible(self, name: str) -> bool:
        return name not in hidden_field_names(self.config, self.values)

    def rendered_sections(self) -> List[Tuple[FormSection, List[FormFieldConfig]]]:
        """Each section with the fields that pass their condition, in order."""
        return [(section, visible_fields(section.fields, self.values)) for section in self.config.sections]

    def rendered_field_names(self) -> List[str]:
        return [f.name for _, fields in self.rendered_sections() for f in fields]

    def hidden_names(self) -> Set[str]:
        return hidden_field_names(self.config, self.values)

    # ========== WRITE (dispatcher only) ==========

    def commit(self, name: str, value: Any) -> None:
        self.values[name] = value

    def apply_patch(self, patch: Mapping[str, Any]) -> None:
        self.values.update(patch)

    # ========== SUBMISSION ==========

    def build_payload(self) -> Dict[str, Any]:
        """State minus fields whose condition is currently false."""
        hidden = self.hidden_names()
        return {name: value for name, value in self.values.items() if name not in hidden}
