"""
Unified Field Change Dispatcher.

Every control of a form funnels its edits here. One dispatch commits the
new value, runs the recompute engine against a snapshot that already holds
it, applies the resulting patch and reports which fields changed value or
visibility, all in the same update.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Set

if TYPE_CHECKING:
    from pyqt_bizforms.forms.form_controller import FormController

logger = logging.getLogger(__name__)

# Debug flag for verbose dispatcher logging
DEBUG_DISPATCHER = False


@dataclass(frozen=True)
class FieldChangeEvent:
    """Immutable event representing a field change."""
    field_name: str
    value: Any
    source: 'FormController'


@dataclass
class DispatchResult:
    """What one dispatch changed.

    ``values`` holds the committed value plus every patched field.
    ``shown`` / ``hidden`` are the fields whose visibility flipped.
    """
    values: Dict[str, Any] = field(default_factory=dict)
    shown: Set[str] = field(default_factory=set)
    hidden: Set[str] = field(default_factory=set)
    blocked: bool = False

    @property
    def visibility_changed(self) -> bool:
        return bool(self.shown or self.hidden)


class FieldChangeDispatcher:
    """Singleton dispatcher for all field changes. Stateless."""

    _instance = None

    @classmethod
    def instance(cls) -> 'FieldChangeDispatcher':
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def dispatch(self, event: FieldChangeEvent) -> DispatchResult:
        """Handle a field change event."""
        source = event.source

        if DEBUG_DISPATCHER:
            logger.info(f"DISPATCH: {source.config.title}.{event.field_name} = {repr(event.value)[:50]}")

        # Reentrancy guard: widget refreshes triggered by this dispatch must not dispatch again
        if source._dispatching:
            logger.debug(f"Dispatch of '{event.field_name}' blocked, '{source.config.title}' already dispatching")
            return DispatchResult(blocked=True)
        source._dispatching = True

        try:
            state = source.state
            hidden_before = state.hidden_names()

            # 1. Commit the triggering value
            state.commit(event.field_name, event.value)

            # 2. Recompute against a snapshot that includes it
            field_config = source.config.get_field(event.field_name)
            patch: Dict[str, Any] = {}
            if field_config is not None:
                patch = source.recompute.compute(field_config, event.value, state.snapshot())
            else:
                logger.warning(f"Change for undeclared field '{event.field_name}' committed without recompute")

            # 3. Apply the patch (it may overwrite the triggering field)
            if patch:
                state.apply_patch(patch)
                logger.debug(f"Applied patch from '{event.field_name}': {sorted(patch)}")

            values = {event.field_name: state.get(event.field_name)}
            values.update({name: state.get(name) for name in patch})

            # 4. Visibility after the whole update
            hidden_after = state.hidden_names()
            return DispatchResult(
                values=values,
                shown=hidden_before - hidden_after,
                hidden=hidden_after - hidden_before,
            )
        finally:
            source._dispatching = False

    def reset(self, source: 'FormController', initial_data: Optional[Dict[str, Any]] = None) -> DispatchResult:
        """Reseed the source's state; reports every value as changed."""
        hidden_before = source.state.hidden_names()
        source.state.reset(initial_data)
        hidden_after = source.state.hidden_names()
        return DispatchResult(
            values=source.state.snapshot(),
            shown=hidden_before - hidden_after,
            hidden=hidden_after - hidden_before,
        )
