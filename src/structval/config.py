"""Validator configuration.

A Validator is built from one plain configuration value instead of global
state. Configurations come from code, the environment or a YAML file:

    ValidatorConfig(full_error_path=True)
    ValidatorConfig.from_env()
    ValidatorConfig.from_yaml(Path("structval.yaml"))

YAML layout (validated against ``schemas/config.schema.json``):

    fullErrorPath: true
    rules: [required, gte, lte, aZ09_]   # optional subset of standard rules
    standardAliases: false               # default true
    aliases:
      handle: aZ09_,gte=2,lte=15
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError as SchemaError

from structval.rules import STANDARD_ALIASES, standard_rules
from structval.types import ConfigError, Rule

logger = logging.getLogger(__name__)

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "config.schema.json"

_TRUTHY = {"1", "true", "yes", "on"}


def _load_schema() -> dict[str, Any]:
    with _SCHEMA_PATH.open() as fh:
        return json.load(fh)


def _json_path(error: SchemaError) -> str:
    """Convert a jsonschema error path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


def _referenced_names(declaration: str) -> set[str]:
    return {piece.partition("=")[0].strip() for piece in declaration.split(",")}


@dataclass
class ValidatorConfig:
    """Everything a Validator is built from.

    Attributes:
        full_error_path: Prefix nested failures with the parent field path
        rules: Rules to install, keyed by name
        aliases: Alias name to declaration, registered in insertion order
    """

    full_error_path: bool = False
    rules: dict[str, Rule] = field(default_factory=standard_rules)
    aliases: dict[str, str] = field(default_factory=lambda: dict(STANDARD_ALIASES))

    def __post_init__(self) -> None:
        # Standard aliases over rules left out of a subset are dropped
        installed = set(self.rules)
        self.aliases = {
            alias: declaration
            for alias, declaration in self.aliases.items()
            if STANDARD_ALIASES.get(alias) != declaration
            or _referenced_names(declaration) <= installed
        }

    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """Create config from environment variables.

        Resolution order:
        1. STRUCTVAL_CONFIG: path to a YAML config file
        2. Defaults (standard rules and aliases)

        STRUCTVAL_FULL_ERROR_PATH, when set, overrides the full error path
        setting of either.
        """
        path = os.environ.get("STRUCTVAL_CONFIG")
        config = cls.from_yaml(Path(path)) if path else cls()

        flag = os.environ.get("STRUCTVAL_FULL_ERROR_PATH")
        if flag is not None:
            config.full_error_path = flag.strip().lower() in _TRUTHY
        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "ValidatorConfig":
        """Load a config file.

        Raises:
            ConfigError: If the file cannot be read, is not valid YAML,
                violates the config schema or names an unknown standard rule
        """
        try:
            with path.open() as fh:
                raw = yaml.safe_load(fh)
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error in {path}: {exc}") from exc

        config = cls.from_dict(raw if raw is not None else {}, source=str(path))
        logger.info(
            "Loaded validator config from %s (%d rules, %d aliases)",
            path,
            len(config.rules),
            len(config.aliases),
        )
        return config

    @classmethod
    def from_dict(cls, data: Any, source: str = "<config>") -> "ValidatorConfig":
        """Create config from an already-parsed document."""
        validator = Draft202012Validator(_load_schema())
        issues = [
            f"{_json_path(error) or '<root>'}: {error.message}"
            for error in sorted(validator.iter_errors(data), key=_json_path)
        ]
        if issues:
            raise ConfigError(f"Invalid validator config {source}", issues)

        available = standard_rules()
        names = data.get("rules")
        if names is None:
            rules = available
        else:
            unknown = [n for n in names if n not in available]
            if unknown:
                raise ConfigError(
                    f"Invalid validator config {source}",
                    [f"rules: unknown standard rule {n!r}" for n in unknown],
                )
            rules = {n: available[n] for n in names}

        aliases: dict[str, str] = {}
        if data.get("standardAliases", True):
            aliases.update(STANDARD_ALIASES)
        aliases.update(data.get("aliases", {}))

        return cls(
            full_error_path=data.get("fullErrorPath", False),
            rules=rules,
            aliases=aliases,
        )
