"""Rule declaration and execution engine for the attribute rewriter.

Rewrite handlers declare their intent via the ``@rewrites`` decorator, which
records the phase they belong to and optional ordering constraints. At runtime
the :class:`RewriteEngine` collects those declarations, organises them per
:class:`RewritePhase` and applies them to one element's attribute set.

Architecture

`Declaration layer`
: ``@rewrites`` stores a lightweight :class:`RuleDefinition` on every handler.

`Registry layer`
: :class:`RewriteRegistry` collates definitions into sorted :class:`RewriteRule`
  instances grouped by phase.

`Execution layer`
: :class:`RewriteEngine` runs every phase in order against a
  :class:`~sprout.core.context.RewriteContext`.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, cast


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .context import RewriteContext


class RewritePhase(Enum):
    """Ordered steps applied to the attributes of a single element.

    ``REQUEST``
    : synthesise the request verb for elements carrying the request marker.

    ``VALUES``
    : accumulate ``val:<field>`` directives into the extra values attribute.

    ``REPLACE``
    : expand the replace shorthand.

    ``DIRECTIVES``
    : map every remaining known directive onto its wire attribute.

    ``CLEANUP``
    : drop the directive attributes consumed by the previous phases.
    """

    REQUEST = auto()
    VALUES = auto()
    REPLACE = auto()
    DIRECTIVES = auto()
    CLEANUP = auto()


RuleCallable = Callable[["RewriteContext"], None]


@dataclass
class RewriteRule:
    """Concrete rewrite rule registered in the engine."""

    priority: int
    phase: RewritePhase
    name: str
    handler: RuleCallable
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()


@dataclass(frozen=True)
class RuleDefinition:
    """Descriptor installed on handler callables by the decorator."""

    phase: RewritePhase
    priority: int = 0
    name: str | None = None
    before: tuple[str, ...] = ()
    after: tuple[str, ...] = ()

    def bind(self, handler: RuleCallable) -> RewriteRule:
        """Create a concrete rule instance bound to the callable."""
        name = self.name or getattr(handler, "__name__", handler.__class__.__name__)
        return RewriteRule(
            phase=self.phase,
            priority=self.priority,
            name=name,
            handler=handler,
            before=self.before,
            after=self.after,
        )


class RewriteRegistry:
    """Container used to gather rewrite rules before execution."""

    def __init__(self) -> None:
        self._rules: dict[RewritePhase, list[RewriteRule]] = {}

    def register(self, rule: RewriteRule) -> None:
        """Register a rule for later execution."""
        bucket = self._rules.setdefault(rule.phase, [])
        bucket.append(rule)
        bucket[:] = self._sort_rules(bucket)

    def rules_for_phase(self, phase: RewritePhase) -> tuple[RewriteRule, ...]:
        """Return the ordered rules of the requested phase."""
        return tuple(self._rules.get(phase, ()))

    def describe(self) -> list[dict[str, object]]:
        """Return a serialisable snapshot of the registered rules."""
        entries: list[dict[str, object]] = []
        for phase in RewritePhase:
            for order, rule in enumerate(self.rules_for_phase(phase)):
                entries.append(
                    {
                        "phase": phase.name,
                        "name": rule.name,
                        "priority": rule.priority,
                        "before": list(rule.before),
                        "after": list(rule.after),
                        "order": order,
                    }
                )
        return entries

    def _sort_rules(self, rules: list[RewriteRule]) -> list[RewriteRule]:
        """Return rules ordered deterministically using before/after constraints."""
        if len(rules) <= 1:
            return list(rules)

        name_to_index: dict[str, int] = {}
        for index, rule in enumerate(rules):
            name_to_index.setdefault(rule.name, index)

        adjacency: dict[int, set[int]] = {index: set() for index in range(len(rules))}
        indegree: dict[int, int] = dict.fromkeys(range(len(rules)), 0)

        def _add_edge(source: int, target: int) -> None:
            if target in adjacency[source]:
                return
            adjacency[source].add(target)
            indegree[target] += 1

        for current_index, rule in enumerate(rules):
            for target_name in rule.before:
                target_index = name_to_index.get(target_name)
                if target_index is not None:
                    _add_edge(current_index, target_index)
            for target_name in rule.after:
                target_index = name_to_index.get(target_name)
                if target_index is not None:
                    _add_edge(target_index, current_index)

        def _key(idx: int) -> tuple[int, str, int]:
            return (rules[idx].priority, rules[idx].name, idx)

        queue: deque[int] = deque(
            sorted((index for index, count in indegree.items() if count == 0), key=_key)
        )
        ordered: list[int] = []

        while queue:
            current = queue.popleft()
            ordered.append(current)
            for neighbour in sorted(adjacency[current], key=_key):
                indegree[neighbour] -= 1
                if indegree[neighbour] == 0:
                    queue.append(neighbour)
            queue = deque(sorted(queue, key=_key))

        if len(ordered) != len(rules):
            cycle_names = sorted(
                rule.name for index, rule in enumerate(rules) if index not in ordered
            )
            raise RuntimeError(
                "Cyclic rewrite rule dependencies detected: " + ", ".join(cycle_names)
            )

        return [rules[index] for index in ordered]


def rewrites(
    phase: RewritePhase,
    *,
    priority: int = 0,
    name: str | None = None,
    before: Iterable[str] = (),
    after: Iterable[str] = (),
) -> Callable[[RuleCallable], RuleCallable]:
    """Decorator used to register attribute rewrite handlers."""
    definition = RuleDefinition(
        phase=phase,
        priority=priority,
        name=name,
        before=tuple(before),
        after=tuple(after),
    )

    def decorator(handler: RuleCallable) -> RuleCallable:
        cast(Any, handler).__rewrite_rule__ = definition
        return handler

    return decorator


class RewriteEngine:
    """Execution engine that applies the registered rules phase by phase."""

    def __init__(self, registry: RewriteRegistry | None = None) -> None:
        self.registry = registry or RewriteRegistry()

    def collect_from(self, owner: Any) -> None:
        """Collect decorated callables from an object or module."""
        for attribute in dir(owner):
            handler = getattr(owner, attribute)
            definition = getattr(handler, "__rewrite_rule__", None)
            if isinstance(definition, RuleDefinition):
                self.registry.register(definition.bind(handler))

    def register(self, handler: RuleCallable) -> None:
        """Register a standalone callable decorated with ``@rewrites``."""
        definition = getattr(handler, "__rewrite_rule__", None)
        if not isinstance(definition, RuleDefinition):
            msg = "Handler must be decorated with @rewrites"
            raise TypeError(msg)
        self.registry.register(definition.bind(handler))

    def run(self, context: RewriteContext) -> None:
        """Execute all registered rules against the context's attributes."""
        for phase in RewritePhase:
            context.phase = phase
            for rule in self.registry.rules_for_phase(phase):
                rule.handler(context)


__all__ = [
    "RewriteEngine",
    "RewritePhase",
    "RewriteRegistry",
    "RewriteRule",
    "RuleDefinition",
    "rewrites",
]
