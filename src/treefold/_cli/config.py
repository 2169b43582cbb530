"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from treefold._errors import TreefoldError
from treefold._eval_engine import DEFAULT_VOLATILE_KINDS
from treefold._io import DocumentFormat
from treefold.std import PLUGINS_BY_NAME


class ConfigError(TreefoldError):
    """Error in treefold configuration."""


@dataclass(slots=True, frozen=True)
class TreefoldConfig:
    """Configuration loaded from the ``[tool.treefold]`` table of pyproject.toml.

    Attributes:
        plugins: Names of the standard plugins to compose. Defaults to all.
        volatile_kinds: Kinds that ``eval`` never memoizes. A configured list
            replaces the default, which holds ``st/get``.
        format: Document format used when exporting an IR without a suffix hint.
        project_root: Directory containing the pyproject.toml, if one was found.

    """

    plugins: tuple[str, ...] = tuple(PLUGINS_BY_NAME)
    volatile_kinds: frozenset[str] = DEFAULT_VOLATILE_KINDS
    format: DocumentFormat = DocumentFormat.TOML
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _string_list(section: dict[str, object], key: str) -> list[str] | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        msg = f"Invalid [tool.treefold].{key}: expected a list of strings"
        raise ConfigError(msg)
    return list(value)


def load_config(pyproject_path: Path) -> TreefoldConfig:
    """Load and validate [tool.treefold] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed TreefoldConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("treefold", {})
    if not section:
        return TreefoldConfig(project_root=project_root)

    unknown = set(section) - {"plugins", "volatile-kinds", "format"}
    if unknown:
        msg = f"Unknown key(s) in [tool.treefold]: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)

    plugins = _string_list(section, "plugins")
    if plugins is not None:
        missing = [name for name in plugins if name not in PLUGINS_BY_NAME]
        if missing:
            msg = (
                f"Invalid [tool.treefold].plugins: unknown plugin(s) {', '.join(missing)}. "
                f"Available: {', '.join(PLUGINS_BY_NAME)}"
            )
            raise ConfigError(msg)

    volatile_kinds = _string_list(section, "volatile-kinds")

    fmt = DocumentFormat.TOML
    if "format" in section:
        try:
            fmt = DocumentFormat(section["format"])
        except ValueError:
            msg = f"Invalid [tool.treefold].format: expected 'toml' or 'json', got {section['format']!r}"
            raise ConfigError(msg) from None

    return TreefoldConfig(
        plugins=tuple(plugins) if plugins is not None else tuple(PLUGINS_BY_NAME),
        volatile_kinds=frozenset(volatile_kinds) if volatile_kinds is not None else DEFAULT_VOLATILE_KINDS,
        format=fmt,
        project_root=project_root,
    )


def get_config() -> TreefoldConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        TreefoldConfig (defaults if no pyproject.toml or no [tool.treefold] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return TreefoldConfig()
    return load_config(pyproject_path)
