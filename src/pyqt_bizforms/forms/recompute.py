"""
Cross-field recompute engine.

A field's ``on_change(new_value, snapshot)`` returns a flat patch of other
fields (quantity × unit price → total). The default contract is single-hop:
the patch is merged as-is and patched fields do not run their own
on_change, so A → B → C chains stop at B.

RecomputeMode.CASCADE is the opt-in alternative. It needs every on_change
to declare the fields it writes in ``affects``; those edges form a
dependency graph that must be acyclic, and patched fields re-run their
on_change in topological order, each at most once per edit.
"""

import heapq
import logging
from collections import defaultdict, deque
from typing import Any, Dict, List, Mapping, Optional

from pyqt_bizforms.exceptions import FormConfigError

from .form_config_types import FormConfig, FormFieldConfig, RecomputeMode

logger = logging.getLogger(__name__)


def coerce_patch(field_name: str, patch: Any) -> Dict[str, Any]:
    """Normalize an on_change return value; None or an empty mapping means no patch."""
    if not patch:
        return {}
    if not isinstance(patch, Mapping):
        raise TypeError(
            f"on_change of field '{field_name}' returned {type(patch).__name__}; "
            f"expected a mapping of field name to value or None"
        )
    return dict(patch)


class DependencyGraph:
    """
    Field → dependent fields, built from ``affects`` declarations.

    Raises FormConfigError if the declarations contain a cycle, since a
    cyclic cascade has no well-defined application order.
    """

    def __init__(self, config: FormConfig):
        self.edges: Dict[str, List[str]] = defaultdict(list)
        known = set(config.field_names())
        for f in config.iter_fields():
            for target in f.affects:
                if target not in known:
                    logger.warning(f"Field '{f.name}' declares it affects unknown field '{target}'")
                self.edges[f.name].append(target)
        self.order: Dict[str, int] = self._topological_order(known | set(self.edges))

    def _topological_order(self, nodes: set) -> Dict[str, int]:
        in_degree = {node: 0 for node in nodes}
        for source, targets in self.edges.items():
            for target in targets:
                in_degree[target] = in_degree.get(target, 0) + 1

        queue = deque(sorted(node for node, degree in in_degree.items() if degree == 0))
        order: Dict[str, int] = {}
        while queue:
            node = queue.popleft()
            order[node] = len(order)
            for target in self.edges.get(node, []):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    queue.append(target)

        if len(order) != len(in_degree):
            cyclic = sorted(node for node in in_degree if node not in order)
            raise FormConfigError(f"Cyclic on_change dependencies between fields {cyclic}")
        return order

    def dependents(self, name: str) -> List[str]:
        return list(self.edges.get(name, []))

    def rank(self, name: str) -> int:
        return self.order.get(name, len(self.order))


class RecomputeEngine:
    """Computes the patch for one field change.

    Stateless apart from the dependency graph; never mutates the snapshot it
    is given, and hands each on_change its own copy.
    """

    def __init__(self, config: FormConfig):
        self.config = config
        self.mode = config.recompute_mode
        self.graph: Optional[DependencyGraph] = (
            DependencyGraph(config) if self.mode is RecomputeMode.CASCADE else None
        )

    def compute(self, field: FormFieldConfig, value: Any, snapshot: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Return the combined patch for ``field`` changing to ``value``.

        Args:
            field: The edited field
            value: Its new (already committed) value
            snapshot: Form state including the new value

        Returns:
            Flat field name → value patch, possibly empty
        """
        if field.on_change is None:
            return {}
        patch = coerce_patch(field.name, field.on_change(value, dict(snapshot)))
        if self.mode is RecomputeMode.SINGLE_HOP or not patch:
            return patch
        return self._cascade(field.name, patch, snapshot)

    def _cascade(self, origin: str, patch: Dict[str, Any], snapshot: Mapping[str, Any]) -> Dict[str, Any]:
        working = dict(snapshot)
        working.update(patch)
        combined = dict(patch)
        fired = {origin}
        heap: List = []
        queued = set()

        def enqueue(names):
            for name in names:
                if name not in fired and name not in queued:
                    heapq.heappush(heap, (self.graph.rank(name), name))
                    queued.add(name)

        enqueue(patch)
        while heap:
            _, name = heapq.heappop(heap)
            queued.discard(name)
            dependent = self.config.get_field(name)
            if dependent is None or dependent.on_change is None:
                continue
            fired.add(name)
            sub_patch = coerce_patch(name, dependent.on_change(working[name], dict(working)))
            logger.debug(f"Cascade {origin} -> {name}: {sorted(sub_patch)}")
            working.update(sub_patch)
            combined.update(sub_patch)
            enqueue(sub_patch)
        return combined
