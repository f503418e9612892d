"""Iteration expressions for template sets.

``iterate: "svc in services"`` renders the template set once per item of
``services``, with the item bound to ``svc``. Supported forms:

    item in items
    item in dd.items if item.enabled
    module in modules >> component in module.components

A leading ``dd.`` addresses the data root explicitly; otherwise the first
path component is looked up in the current scope (earlier loop variables,
flattened data) and then in the data root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping

from mergegen.engine import TemplateEngine
from mergegen.errors import ConfigError

DATA_ROOT = "dd"


@dataclass(frozen=True)
class IterationStep:
    var: str
    expr: str
    condition: str | None = None


def parse_step(text: str) -> IterationStep:
    iter_part, sep, condition = text.partition(" if ")
    var, in_sep, expr = iter_part.partition(" in ")
    var, expr = var.strip(), expr.strip()
    if not in_sep or not var.isidentifier() or not expr:
        raise ConfigError(f"invalid iteration syntax: '{text.strip()}'")
    return IterationStep(var, expr, condition.strip() if sep else None)


def parse_iteration(text: str) -> list[IterationStep]:
    """Parse a (possibly nested) iteration expression into ordered steps."""
    return [parse_step(part) for part in text.split(">>")]


def resolve_path(expr: str, scope: Mapping[str, Any]) -> Any:
    """Follow a dotted path through mappings, sequences and attributes."""
    parts = expr.split(".")
    head, rest = parts[0], parts[1:]
    if head == DATA_ROOT and DATA_ROOT in scope:
        current = scope[DATA_ROOT]
    elif head in scope:
        current = scope[head]
    elif isinstance(scope.get(DATA_ROOT), Mapping) and head in scope[DATA_ROOT]:
        current = scope[DATA_ROOT][head]
    else:
        raise ConfigError(f"iteration path '{expr}' not found: no '{head}' in data")

    for part in rest:
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, (list, tuple)) and part.isdigit() and int(part) < len(current):
            current = current[int(part)]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            raise ConfigError(f"iteration path '{expr}' not found: no '{part}'")
    return current


def iterate_contexts(
    steps: list[IterationStep],
    context: Mapping[str, Any],
    engine: TemplateEngine,
) -> Iterator[dict[str, Any]]:
    """Yield one rendering context per combination of iterated items.

    Raises:
        ConfigError: A path is missing or does not resolve to a list.
    """
    if not steps:
        yield dict(context)
        return

    step, rest = steps[0], steps[1:]
    items = resolve_path(step.expr, context)
    if not isinstance(items, (list, tuple)):
        raise ConfigError(
            f"iteration expression '{step.expr}' resolved to {type(items).__name__}, not a list"
        )
    for item in items:
        scope = {**context, step.var: item}
        if step.condition and not engine.test(step.condition, scope):
            continue
        yield from iterate_contexts(rest, scope, engine)
