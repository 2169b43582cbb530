"""Composed registry of kinds, traits and lift rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from treefold._errors import RegistryConflictError

from ._spec import KindSpec, TraitSpec, TypeSpec, format_type

if TYPE_CHECKING:
    from ._plugin import Plugin

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Registry:
    """Immutable lookup tables merged from a set of plugins.

    Build one with ``Registry.compose``; every naming conflict between the
    plugins is reported there rather than during elaboration.

    Attributes:
        plugins: The composed plugins, in composition order.
        kinds: Fixed specs keyed by kind name.
        traits: Trait specs keyed by trait name, with merged mappings.
        lifts: Python type to literal kind.

    """

    plugins: tuple[Plugin, ...] = ()
    kinds: dict[str, KindSpec] = field(default_factory=dict)
    traits: dict[str, TraitSpec] = field(default_factory=dict)
    lifts: dict[type, str] = field(default_factory=dict)

    @classmethod
    def compose(cls, *plugins: Plugin) -> Registry:  # noqa: C901
        """Merge plugins into a registry.

        Args:
            *plugins: Plugins to compose.

        Returns:
            A new Registry.

        Raises:
            RegistryConflictError: If two plugins share a name or define the
                same kind, a kind lies outside its plugin's namespace, a trait
                instance or lift rule is defined twice with different targets,
                a trait is declared with two outputs, or a trait mapping or
                lift rule names an unknown kind.

        """
        kinds: dict[str, KindSpec] = {}
        kind_owner: dict[str, str] = {}
        traits: dict[str, TraitSpec] = {}
        lifts: dict[type, str] = {}
        names: set[str] = set()

        for plugin in plugins:
            if plugin.name in names:
                msg = f"Plugin '{plugin.name}' is composed more than once"
                raise RegistryConflictError(msg)
            names.add(plugin.name)

            for kind, spec in plugin.kinds.items():
                if not kind.startswith(plugin.prefix):
                    msg = f"Kind '{kind}' of plugin '{plugin.name}' is outside namespace '{plugin.prefix}'"
                    raise RegistryConflictError(msg)
                if kind in kinds:
                    msg = f"Kind '{kind}' is defined by both '{kind_owner[kind]}' and '{plugin.name}'"
                    raise RegistryConflictError(msg)
                kinds[kind] = spec
                kind_owner[kind] = plugin.name

            for name, trait in plugin.traits.items():
                existing = traits.get(name)
                if existing is None:
                    traits[name] = TraitSpec(output=trait.output, mapping=trait.mapping)
                    continue
                if existing.output != trait.output:
                    msg = (
                        f"Trait '{name}' is declared with output {format_type(existing.output)} "
                        f"and {format_type(trait.output)}"
                    )
                    raise RegistryConflictError(msg)
                merged = dict(existing.mapping)
                for type_tag, target in trait.mapping.items():
                    if merged.get(type_tag, target) != target:
                        msg = f"Trait '{name}' maps type {type_tag} to both '{merged[type_tag]}' and '{target}'"
                        raise RegistryConflictError(msg)
                    merged[type_tag] = target
                traits[name] = TraitSpec(output=existing.output, mapping=merged)

            for py_type, literal_kind in plugin.lifts.items():
                if lifts.get(py_type, literal_kind) != literal_kind:
                    msg = f"Type '{py_type.__name__}' lifts to both '{lifts[py_type]}' and '{literal_kind}'"
                    raise RegistryConflictError(msg)
                lifts[py_type] = literal_kind

        for name, trait in traits.items():
            if name in kinds:
                msg = f"Trait '{name}' collides with a kind of the same name defined by '{kind_owner[name]}'"
                raise RegistryConflictError(msg)
            for type_tag, target in trait.mapping.items():
                if target not in kinds:
                    msg = f"Trait '{name}' maps type {type_tag} to unknown kind '{target}'"
                    raise RegistryConflictError(msg)
        for py_type, literal_kind in lifts.items():
            spec = kinds.get(literal_kind)
            if spec is None or spec.arity != 0 or spec.payload:
                msg = f"Lift rule for '{py_type.__name__}' names '{literal_kind}', which is not a literal kind"
                raise RegistryConflictError(msg)

        logger.debug(
            "Composed registry from %d plugins: %d kinds, %d traits, %d lift rules",
            len(plugins),
            len(kinds),
            len(traits),
            len(lifts),
        )
        return cls(plugins=tuple(plugins), kinds=kinds, traits=traits, lifts=lifts)

    def kind_spec(self, kind: str) -> KindSpec | None:
        return self.kinds.get(kind)

    def trait_spec(self, name: str) -> TraitSpec | None:
        return self.traits.get(name)

    def lift_kind(self, value: Any) -> str | None:
        """Get the literal kind a raw value lifts into.

        The value's class hierarchy is searched most-specific first, so a
        ``bool`` lifts by a ``bool`` rule before an ``int`` rule.

        Returns:
            The literal kind, or None if no rule applies.

        """
        for py_type in type(value).__mro__:
            literal_kind = self.lifts.get(py_type)
            if literal_kind is not None:
                return literal_kind
        return None

    def tag_of(self, value: Any) -> TypeSpec | None:
        """Get the type tag of a raw value, or None if it cannot be lifted."""
        literal_kind = self.lift_kind(value)
        if literal_kind is None:
            return None
        return self.kinds[literal_kind].output

    def __contains__(self, kind: str) -> bool:
        return kind in self.kinds or kind in self.traits

    def __len__(self) -> int:
        return len(self.kinds)
