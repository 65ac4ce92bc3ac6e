from __future__ import annotations

import json
import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, Optional, Union

import json5  # type: ignore
import yaml
from pydantic import BaseModel, Field, field_validator

from .models import DiffError


# Variable replacement pattern.
# Supports:
#   - ${NAME}
#   - ${env:NAME}
# Ignores '$${NAME}' so it can be used to escape a literal '${NAME}'.
VAR_PATTERN = re.compile(
    r"(?<!\$)\$\{([A-Za-z_][A-Za-z0-9_]*(?::[A-Za-z_][A-Za-z0-9_]*)?)\}"
)

VARIABLES_KEY: Final[str] = "variables"


class LogLevel(str, Enum):
    debug = "debug"
    info = "info"
    warning = "warning"
    error = "error"
    critical = "critical"


class LocatorSettings(BaseModel):
    # Strategy 1 probes this many lines on each side of the hint before a full scan.
    exact_search_radius: int = 50
    # Single-line searches (anchor and pure-addition strategies).
    anchor_search_radius: int = 100
    # Strategy 3 search for the first removed line.
    similar_search_radius: int = 100
    # A buffer line shorter than this never counts as a prefix of the sought line.
    similar_min_prefix_len: int = 3

    @field_validator(
        "exact_search_radius",
        "anchor_search_radius",
        "similar_search_radius",
        "similar_min_prefix_len",
    )
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v


class ExtractorSettings(BaseModel):
    fence_tag: str = "diff"
    unknown_file_name: str = "Unknown file"

    @field_validator("fence_tag")
    @classmethod
    def _validate_tag(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("fence_tag must be non-empty")
        return v


class LoggingSettings(BaseModel):
    # Default level for the fuzzpatch logger if not overridden.
    default_level: LogLevel = LogLevel.warning
    # Mapping of logger name -> level override (e.g., {"fuzzpatch": "debug"})
    enabled_loggers: Dict[str, LogLevel] = Field(default_factory=dict)
    # Optional file that receives log output in addition to stderr.
    log_file: Optional[str] = None


class Settings(BaseModel):
    locator: LocatorSettings = Field(default_factory=LocatorSettings)
    extractor: ExtractorSettings = Field(default_factory=ExtractorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _lookup_var_value(name: str, vars_map: Dict[str, Any]) -> tuple[bool, Any]:
    """
    Resolve a variable or environment-backed placeholder name.

    Supports:
      - NAME      -> from vars_map
      - env:NAME  -> from environment (raw string)

    Returns (found, value); callers should leave the placeholder unchanged when
    found is False.
    """
    if name.startswith("env:"):
        env_name = name[4:]
        if not env_name:
            return False, None
        val = os.getenv(env_name)
        if val is None:
            return False, None
        return True, val

    if name in vars_map:
        return True, vars_map[name]

    return False, None


def _interpolate_string(s: str, vars_map: Dict[str, Any]) -> str:
    """Interpolate ${...} placeholders inside arbitrary strings.

    Escaping:
      - '$${NAME}' renders as a literal '${NAME}' with no interpolation.
    """

    def repl(m: re.Match) -> str:
        found, val = _lookup_var_value(m.group(1), vars_map)
        if not found:
            return m.group(0)
        if val is None:
            return ""
        if isinstance(val, (dict, list)):
            return json.dumps(val, ensure_ascii=False)
        return str(val)

    interpolated = VAR_PATTERN.sub(repl, s)
    return interpolated.replace("$${", "${")


def _apply_variables(obj: Any, vars_map: Dict[str, Any]) -> Any:
    if isinstance(obj, str):
        m = VAR_PATTERN.fullmatch(obj)
        if m:
            found, val = _lookup_var_value(m.group(1), vars_map)
            return val if found else obj
        return _interpolate_string(obj, vars_map)
    if isinstance(obj, dict):
        return {k: _apply_variables(v, vars_map) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_apply_variables(v, vars_map) for v in obj]
    return obj


def _load_raw_file(path: Path) -> Any:
    ext = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if ext in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif ext in {".json5", ".jsonc", ".json"}:
        data = json5.loads(text)
    else:
        raise DiffError(f"Unsupported config file extension: {ext}")
    if data is None:
        return {}
    return data


def load_settings(path: Union[str, os.PathLike]) -> Settings:
    data = _load_raw_file(Path(path))
    if not isinstance(data, dict):
        raise DiffError("Root configuration must be a mapping/object")

    data = dict(data)
    vars_map = data.pop(VARIABLES_KEY, None) or {}
    if not isinstance(vars_map, dict):
        raise DiffError("'variables' must be a mapping")

    return Settings.model_validate(_apply_variables(data, vars_map))
