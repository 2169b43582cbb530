"""Plugins: independently authored kind sets and their handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from treefold._errors import RegistryError

from ._spec import KindSpec, TraitSpec  # noqa: TC001 - dataclass field types

if TYPE_CHECKING:
    from treefold._eval_engine import Handler

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Plugin:
    """A named set of node kinds, traits, lift rules and default handlers.

    Attributes:
        name: Namespace prefix. Every kind of the plugin is named ``"<name>/..."``.
        kinds: Fixed specs keyed by kind name.
        traits: Trait specs keyed by trait name. Traits are not namespaced, so
            several plugins may contribute instances of the same trait.
        lifts: Python type of a raw value to the literal kind it lifts into.
        handlers: Factory returning a fresh handler table for the plugin's kinds.
            Called once per composition so handlers may keep per-run state.

    Example:
        >>> Plugin(
        ...     name="num",
        ...     kinds={"num/literal": KindSpec((), "number"), "num/add": KindSpec(("number", "number"), "number")},
        ...     traits={"eq": TraitSpec("boolean", {"number": "num/eq"})},
        ...     lifts={int: "num/literal", float: "num/literal"},
        ... )

    """

    name: str
    kinds: Mapping[str, KindSpec] = field(default_factory=dict)
    traits: Mapping[str, TraitSpec] = field(default_factory=dict)
    lifts: Mapping[type, str] = field(default_factory=dict)
    handlers: Callable[[], Mapping[str, Handler]] | None = None

    @property
    def prefix(self) -> str:
        """Namespace prefix shared by all of the plugin's kinds."""
        return f"{self.name}/"

    @property
    def node_kinds(self) -> tuple[str, ...]:
        """All concrete kinds this plugin must be able to evaluate."""
        return tuple(self.kinds)


def compose_handlers(
    plugins: Sequence[Plugin],
    overrides: Mapping[str, Mapping[str, Handler]] | None = None,
) -> dict[str, Handler]:
    """Build one handler table from a plugin set.

    For each plugin the override table registered under the plugin's name is
    used when present, otherwise the plugin's default handlers.

    Args:
        plugins: Plugins whose kinds will be evaluated.
        overrides: Handler tables keyed by plugin name.

    Returns:
        Mapping from kind name to handler.

    Raises:
        RegistryError: If a plugin declares kinds but has neither default
            handlers nor an override.

    """
    overrides = overrides or {}
    composed: dict[str, Handler] = {}
    for plugin in plugins:
        if plugin.name in overrides:
            logger.debug("Using override handlers for plugin '%s'", plugin.name)
            composed.update(overrides[plugin.name])
        elif plugin.handlers is not None:
            composed.update(plugin.handlers())
        elif plugin.node_kinds:
            msg = f"Plugin '{plugin.name}' has no default handlers and no override"
            raise RegistryError(msg)
    return composed
