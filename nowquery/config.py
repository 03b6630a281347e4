"""
Operator table configuration.

The operator table is static: it is seeded once from the built-in defaults and
optionally extended from a TOML file:

    [operators]
    replace = false

    [[operators.entries]]
    Name = "-contains"
    QueryOperator = "LIKE"
    RequiresValue = true

Location: explicit path, else ``NOWQUERY_CONFIG``, else the per-user config
directory (``config.toml``).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .exceptions import OperatorConfigError
from .operators import DEFAULT_OPERATORS, OperatorTable

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[import-not-found,no-redef]

logger = logging.getLogger(__name__)

APP_NAME = "nowquery"
CONFIG_ENV_VAR = "NOWQUERY_CONFIG"
CONFIG_FILENAME = "config.toml"


@dataclass(frozen=True, slots=True)
class LoadedConfig:
    path: Path
    exists: bool
    operators: OperatorTable


def default_config_path() -> Path:
    return Path(user_config_dir(APP_NAME)) / CONFIG_FILENAME


def resolve_config_path(path: str | os.PathLike[str] | None = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.getenv(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)
    return default_config_path()


def _operators_from_document(doc: dict[str, Any], path: Path) -> OperatorTable:
    section = doc.get("operators")
    if section is None:
        return DEFAULT_OPERATORS
    if not isinstance(section, dict):
        raise OperatorConfigError(f"{path}: [operators] must be a table")

    entries = section.get("entries", [])
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise OperatorConfigError(f"{path}: operators.entries must be an array of tables")
    replace = section.get("replace", False)
    if not isinstance(replace, bool):
        raise OperatorConfigError(f"{path}: operators.replace must be true or false")

    loaded = OperatorTable.from_records(entries)
    if replace:
        if not loaded:
            raise OperatorConfigError(f"{path}: operators.replace requires at least one entry")
        return loaded
    return DEFAULT_OPERATORS.merged(loaded.values())


def load_config(path: str | os.PathLike[str] | None = None) -> LoadedConfig:
    """
    Load configuration, falling back to the built-in operator table.

    Raises:
        OperatorConfigError: If the file exists but cannot be parsed or is invalid.
    """
    resolved = resolve_config_path(path)
    if not resolved.exists():
        logger.debug("no config file at %s; using default operators", resolved)
        return LoadedConfig(path=resolved, exists=False, operators=DEFAULT_OPERATORS)

    try:
        with resolved.open("rb") as f:
            doc = tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise OperatorConfigError(f"{resolved}: invalid TOML: {exc}") from exc
    except OSError as exc:
        raise OperatorConfigError(f"{resolved}: cannot read config: {exc}") from exc

    operators = _operators_from_document(doc, resolved)
    logger.info("loaded %d operators from %s", len(operators), resolved)
    return LoadedConfig(path=resolved, exists=True, operators=operators)


def config_init_template() -> str:
    return (
        "# nowquery configuration\n"
        "#\n"
        "# Entries below are added to the built-in operator table; an entry with\n"
        "# the same Name as a built-in operator replaces it.\n"
        "\n"
        "[operators]\n"
        "replace = false\n"
        "\n"
        "# [[operators.entries]]\n"
        '# Name = "-contains"\n'
        '# QueryOperator = "LIKE"\n'
        "# RequiresValue = true\n"
        '# Description = "contains"\n'
    )
