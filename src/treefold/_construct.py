"""Construction layer: nested call trees built by plugin constructors."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._registry import Plugin


@dataclass(frozen=True, slots=True)
class Node:
    """A call node of a construction tree.

    Construction is permissive: nothing is checked until the tree is
    elaborated against a registry. A node has no identity beyond its
    position in the tree, so a node object used twice becomes two entries.

    Attributes:
        kind: Kind name or trait name.
        args: Positional arguments. Each is a raw value, another Node, or a
            nested dict/tuple/list structure of those.

    """

    kind: str
    args: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    def __str__(self) -> str:
        return f"{self.kind}({', '.join(_format_arg(arg) for arg in self.args)})"


def _format_arg(arg: Any) -> str:
    if isinstance(arg, Node):
        return str(arg)
    if isinstance(arg, Mapping):
        return "{" + ", ".join(f"{key}: {_format_arg(value)}" for key, value in arg.items()) + "}"
    if isinstance(arg, (list, tuple)):
        return "[" + ", ".join(_format_arg(item) for item in arg) + "]"
    return repr(arg)


def node(kind: str, *args: Any) -> Node:
    """Create a call node.

    Example:
        >>> node("num/add", 3, node("num/neg", 4))
        Node(kind='num/add', args=(3, Node(kind='num/neg', args=(4,))))

    """
    return Node(kind, args)


def is_node(value: Any) -> bool:
    return isinstance(value, Node)


def constructors(*plugins: Plugin) -> dict[str, Callable[..., Node]]:
    """Generate one constructor per trait name declared by the plugins.

    Trait constructors build nodes whose kind is the trait name; the
    elaborator later resolves them to a concrete kind by operand type.

    Example:
        >>> ctors = constructors(num_plugin, str_plugin)
        >>> ctors["eq"](1, 2)
        Node(kind='eq', args=(1, 2))

    """
    names = sorted({name for plugin in plugins for name in plugin.traits})

    def make(name: str) -> Callable[..., Node]:
        def construct(*args: Any) -> Node:
            return Node(name, args)

        construct.__name__ = name
        construct.__qualname__ = name
        return construct

    return {name: make(name) for name in names}
