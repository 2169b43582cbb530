"""Tests for plugin composition and registry lookups."""

import pytest

from treefold._errors import RegistryConflictError, RegistryError
from treefold._registry import (
    ANY,
    KindSpec,
    Plugin,
    Registry,
    SameAs,
    TraitSpec,
    compose_handlers,
    format_type,
    normalize_type,
)
from treefold.std import STD_PLUGINS, bool_plugin, num_plugin, std_registry, str_plugin


def _plugin(name: str, **kwargs: object) -> Plugin:
    return Plugin(name=name, **kwargs)  # type: ignore[arg-type]


class TestTypeSpecs:
    def test_normalize_lists_to_tuples(self) -> None:
        assert normalize_type(["number", {"x": ["string"]}]) == ("number", {"x": ("string",)})

    def test_kind_spec_normalizes_inputs_and_output(self) -> None:
        spec = KindSpec(inputs=[["number", "number"]], output={"x": ["number"]})

        assert spec.inputs == (("number", "number"),)
        assert spec.output == {"x": ("number",)}
        assert spec.arity == 1

    def test_payload_kind_takes_one_more_argument(self) -> None:
        spec = KindSpec((ANY,), ANY, payload=True)

        assert spec.arity == 1
        assert spec.argument_count == 2
        assert KindSpec(("number",), "number").argument_count == 1

    def test_format_type(self) -> None:
        assert format_type("number") == "number"
        assert format_type({"x": "number", "y": ("number", "string")}) == "{x: number, y: [number, string]}"
        assert format_type(SameAs(1)) == "same-as(1)"

    def test_plugin_prefix(self) -> None:
        assert num_plugin.prefix == "num/"
        assert "num/add" in num_plugin.node_kinds


class TestRegistryCompose:
    def test_standard_plugins_compose(self) -> None:
        registry = std_registry()

        assert "num/add" in registry
        assert "str/concat" in registry
        assert "eq" in registry
        assert len(registry) == sum(len(plugin.kinds) for plugin in STD_PLUGINS)

    def test_shared_traits_merge(self) -> None:
        registry = Registry.compose(num_plugin, str_plugin, bool_plugin)

        trait = registry.trait_spec("eq")

        assert trait is not None
        assert trait.output == "boolean"
        assert trait.mapping == {"number": "num/eq", "string": "str/eq", "boolean": "bool/eq"}

    def test_duplicate_plugin_rejected(self) -> None:
        with pytest.raises(RegistryConflictError, match="more than once"):
            Registry.compose(num_plugin, num_plugin)

    def test_kind_outside_namespace_rejected(self) -> None:
        plugin = _plugin("geo", kinds={"num/point": KindSpec((), "point")})

        with pytest.raises(RegistryConflictError, match="outside namespace"):
            Registry.compose(plugin)

    def test_trait_colliding_with_kind_rejected(self) -> None:
        plugin = _plugin(
            "geo",
            kinds={"geo/eq": KindSpec((), "point")},
            traits={"geo/eq": TraitSpec("boolean", {})},
        )

        with pytest.raises(RegistryConflictError, match="collides"):
            Registry.compose(plugin)

    @pytest.mark.parametrize("trait_first", [True, False])
    def test_trait_colliding_with_later_kind_rejected(self, *, trait_first: bool) -> None:
        traits = _plugin("shapes", traits={"geo/area": TraitSpec("number", {})})
        kinds = _plugin("geo", kinds={"geo/area": KindSpec(("point",), "number")})
        plugins = (traits, kinds) if trait_first else (kinds, traits)

        with pytest.raises(RegistryConflictError, match="collides with a kind of the same name defined by 'geo'"):
            Registry.compose(*plugins)

    def test_lift_to_payload_kind_rejected(self) -> None:
        plugin = _plugin("tag", kinds={"tag/get": KindSpec((), "string", payload=True)}, lifts={str: "tag/get"})

        with pytest.raises(RegistryConflictError, match="not a literal kind"):
            Registry.compose(plugin)

    def test_trait_output_conflict_rejected(self) -> None:
        plugin = _plugin(
            "geo",
            kinds={"geo/literal": KindSpec((), "point"), "geo/eq": KindSpec(("point", "point"), "number")},
            traits={"eq": TraitSpec("number", {"point": "geo/eq"})},
        )

        with pytest.raises(RegistryConflictError, match="declared with output"):
            Registry.compose(num_plugin, plugin)

    def test_trait_mapping_conflict_rejected(self) -> None:
        plugin = _plugin(
            "alt",
            kinds={"alt/eq": KindSpec(("number", "number"), "boolean")},
            traits={"eq": TraitSpec("boolean", {"number": "alt/eq"})},
        )

        with pytest.raises(RegistryConflictError, match="maps type number to both"):
            Registry.compose(num_plugin, plugin)

    def test_trait_mapping_to_unknown_kind_rejected(self) -> None:
        plugin = _plugin("geo", traits={"eq": TraitSpec("boolean", {"point": "geo/eq"})})

        with pytest.raises(RegistryConflictError, match="unknown kind 'geo/eq'"):
            Registry.compose(plugin)

    def test_lift_conflict_rejected(self) -> None:
        plugin = _plugin("alt", kinds={"alt/literal": KindSpec((), "integer")}, lifts={int: "alt/literal"})

        with pytest.raises(RegistryConflictError, match="lifts to both"):
            Registry.compose(num_plugin, plugin)

    def test_lift_to_non_literal_kind_rejected(self) -> None:
        plugin = _plugin("alt", kinds={"alt/neg": KindSpec(("number",), "number")}, lifts={int: "alt/neg"})

        with pytest.raises(RegistryConflictError, match="not a literal kind"):
            Registry.compose(plugin)

    def test_conflict_errors_are_registry_errors(self) -> None:
        assert issubclass(RegistryConflictError, RegistryError)


class TestRegistryLookups:
    def test_kind_and_trait_specs(self) -> None:
        registry = std_registry()

        assert registry.kind_spec("num/add") == KindSpec(("number", "number"), "number")
        assert registry.kind_spec("nope/nope") is None
        assert registry.trait_spec("show") is not None
        assert registry.trait_spec("num/add") is None

    def test_lift_prefers_most_specific_type(self) -> None:
        registry = std_registry()

        assert registry.lift_kind(True) == "bool/literal"
        assert registry.lift_kind(3) == "num/literal"
        assert registry.lift_kind(2.5) == "num/literal"
        assert registry.lift_kind("x") == "str/literal"
        assert registry.lift_kind(None) is None

    def test_bool_falls_back_to_int_rule_without_bool_plugin(self) -> None:
        registry = Registry.compose(num_plugin)

        assert registry.lift_kind(True) == "num/literal"

    def test_tag_of(self) -> None:
        registry = std_registry()

        assert registry.tag_of(1) == "number"
        assert registry.tag_of("s") == "string"
        assert registry.tag_of(object()) is None


class TestComposeHandlers:
    def test_default_handlers(self) -> None:
        handlers = compose_handlers(STD_PLUGINS)

        assert set(handlers) == {kind for plugin in STD_PLUGINS for kind in plugin.kinds}

    def test_override_replaces_plugin_table(self) -> None:
        def add(entry: object) -> int:
            return 42

        handlers = compose_handlers([num_plugin], overrides={"num": {"num/add": add}})

        assert handlers == {"num/add": add}

    def test_plugin_without_handlers_rejected(self) -> None:
        plugin = _plugin("geo", kinds={"geo/literal": KindSpec((), "point")})

        with pytest.raises(RegistryError, match="no default handlers and no override"):
            compose_handlers([plugin])

    def test_plugin_without_kinds_needs_no_handlers(self) -> None:
        plugin = _plugin("empty", traits={})

        assert compose_handlers([plugin]) == {}

    def test_any_is_a_plain_tag(self) -> None:
        assert ANY == "any"
