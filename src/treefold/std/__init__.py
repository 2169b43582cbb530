"""Standard plugins shipped with treefold.

- num: numbers, arithmetic and ordering
- str: strings and text operations
- bool: booleans and short-circuiting connectives
- core: generic control flow (cond, do, try, retry, guard) and field access
- st: named mutable cells (let, get, set, push)

``STD_PLUGINS`` composes into a registry with no conflicts; the shared
traits ``eq``, ``neq``, ``lt`` and ``show`` merge across plugins.
"""

from treefold._construct import constructors
from treefold._registry import Plugin, Registry

from ._bool import and_, bool_plugin, implies, not_, or_
from ._core import access, attempt, cond, core_plugin, do, guard, retry
from ._num import add, div, ge, gt, le, mod, mul, neg, num_abs, num_max, num_min, num_plugin, sub
from ._st import Cell, st_plugin
from ._str import concat, includes, lower, str_len, str_plugin, trim, upper

STD_PLUGINS: tuple[Plugin, ...] = (num_plugin, str_plugin, bool_plugin, core_plugin, st_plugin)
PLUGINS_BY_NAME: dict[str, Plugin] = {plugin.name: plugin for plugin in STD_PLUGINS}

_trait_constructors = constructors(*STD_PLUGINS)
eq = _trait_constructors["eq"]
neq = _trait_constructors["neq"]
lt = _trait_constructors["lt"]
show = _trait_constructors["show"]


def std_registry() -> Registry:
    """Compose all standard plugins."""
    return Registry.compose(*STD_PLUGINS)


__all__ = [
    "PLUGINS_BY_NAME",
    "STD_PLUGINS",
    "Cell",
    "access",
    "add",
    "and_",
    "attempt",
    "bool_plugin",
    "concat",
    "cond",
    "core_plugin",
    "div",
    "do",
    "eq",
    "ge",
    "gt",
    "guard",
    "implies",
    "includes",
    "le",
    "lower",
    "lt",
    "mod",
    "mul",
    "neg",
    "neq",
    "not_",
    "num_abs",
    "num_max",
    "num_min",
    "num_plugin",
    "or_",
    "retry",
    "show",
    "st_plugin",
    "std_registry",
    "str_len",
    "str_plugin",
    "sub",
    "trim",
    "upper",
]
