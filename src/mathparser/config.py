"""Settings and definitions-file loading for mathparser.

Definitions files are YAML:

    constants:
      g: 9.81
      half_pi: pi / 2        # expressions see the constants defined so far
    functions:
      hypot:
        params: [a, b]
        body: (a^2 + b^2)^0.5
      cube: "cube(x) = x^3"  # string form
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from mathparser.errors import ConfigError, MathParserError
from mathparser.functions import parse_definition
from mathparser.registry import Registry

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = "Enter an expression: "

_SECTIONS = {"constants", "functions"}


@dataclass
class Settings:
    """Runtime settings for the command line.

    Attributes:
        definitions_path: Definitions file loaded at startup, if any
        log_level: Logging level name
        prompt: Prompt shown by the REPL
    """

    definitions_path: Path | None = None
    log_level: str = "WARNING"
    prompt: str = DEFAULT_PROMPT

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables.

        Reads:
        1. MATHPARSER_DEFINITIONS: path to a definitions file
        2. MATHPARSER_LOG_LEVEL: logging level name (default WARNING)
        3. MATHPARSER_PROMPT: REPL prompt
        """
        definitions = os.environ.get("MATHPARSER_DEFINITIONS")
        return cls(
            definitions_path=Path(definitions) if definitions else None,
            log_level=os.environ.get("MATHPARSER_LOG_LEVEL", "WARNING").upper(),
            prompt=os.environ.get("MATHPARSER_PROMPT", DEFAULT_PROMPT),
        )


def load_definitions(path: Path, registry: Registry | None = None) -> Registry:
    """Load constants and functions from a YAML definitions file.

    Args:
        path: The definitions file
        registry: Registry to add to; a new empty one if None

    Returns:
        The registry holding the loaded definitions

    Raises:
        ConfigError: If the file is missing, is not valid YAML, or holds an
            invalid definition
    """
    registry = registry if registry is not None else Registry()
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Definitions file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        logger.warning("Definitions file %s is empty", path)
        return registry

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping with 'constants' and/or 'functions'")

    unknown = set(data) - _SECTIONS
    if unknown:
        raise ConfigError(f"{path}: unknown section(s): {', '.join(sorted(unknown))}")

    _load_constants(path, data.get("constants") or {}, registry)
    _load_functions(path, data.get("functions") or {}, registry)

    logger.info("Loaded %d definition(s) from %s", len(registry.names()), path)
    return registry


def _load_constants(path: Path, constants: object, registry: Registry) -> None:
    if not isinstance(constants, dict):
        raise ConfigError(f"{path}: 'constants' must be a mapping")

    for name, value in constants.items():
        try:
            if isinstance(value, bool) or not isinstance(value, (int, float, str)):
                raise ConfigError(f"value must be a number or expression, got {value!r}")
            if isinstance(value, str):
                value = registry.evaluate(value)
            registry.define_constant(str(name), value)
        except MathParserError as e:
            raise ConfigError(f"{path}: constant '{name}': {e}") from e


def _load_functions(path: Path, functions: object, registry: Registry) -> None:
    if not isinstance(functions, dict):
        raise ConfigError(f"{path}: 'functions' must be a mapping")

    for name, spec in functions.items():
        try:
            if isinstance(spec, str):
                defined_name, function = parse_definition(spec)
                if defined_name != name:
                    raise ConfigError(
                        f"definition names '{defined_name}' but is listed as '{name}'"
                    )
                registry.add_function(str(name), function)
            elif isinstance(spec, dict):
                params = spec.get("params") or []
                body = spec.get("body")
                if not isinstance(params, list) or not isinstance(body, str):
                    raise ConfigError("expected 'params' (list) and 'body' (string)")
                registry.define_function(str(name), [str(p) for p in params], body)
            else:
                raise ConfigError(f"expected a mapping or 'name(params) = body', got {spec!r}")
        except MathParserError as e:
            raise ConfigError(f"{path}: function '{name}': {e}") from e
