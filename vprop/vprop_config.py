"""
Runner configuration, loaded from YAML and the environment.

Example:

    strict: true
    debug: false
    builtins: [callable, store]
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

import yaml

from vprop.vprop_builtins import BUILTIN_EXTENSIONS

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


def env_flag(name: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class RunnerConfig:
    """Settings for a ScriptRunner: ambient strictness, debug tracing, built-in extensions."""
    strict: bool = False
    debug: bool = False
    builtins: Tuple[str, ...] = field(default_factory=lambda: tuple(BUILTIN_EXTENSIONS))

    def __post_init__(self):
        unknown = [b for b in self.builtins if b not in BUILTIN_EXTENSIONS]
        if unknown:
            raise ValueError(f"unknown built-in extension(s): {', '.join(unknown)}")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'RunnerConfig':
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        extra = sorted(set(data) - known)
        if extra:
            raise ValueError(f"unknown config key(s): {', '.join(extra)}")
        for flag in ("strict", "debug"):
            if flag in data and not isinstance(data[flag], bool):
                raise ValueError(f"'{flag}' must be a boolean, got {data[flag]!r}")
        if "builtins" in data:
            builtins = data["builtins"]
            if builtins is None:
                builtins = ()
            if isinstance(builtins, str) or not isinstance(builtins, (list, tuple)):
                raise ValueError(f"'builtins' must be a list, got {builtins!r}")
            data["builtins"] = tuple(builtins)
        return cls(**data)

    @classmethod
    def from_yaml(cls, text: str) -> 'RunnerConfig':
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid config YAML: {e}") from e
        if data is not None and not isinstance(data, dict):
            raise ValueError("config YAML must be a mapping")
        return cls.from_mapping(data)

    @classmethod
    def from_file(cls, path: str | os.PathLike) -> 'RunnerConfig':
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> 'RunnerConfig':
        """Applies VPROP_STRICT / VPROP_DEBUG overrides."""
        environ = os.environ if environ is None else environ
        changes = {}
        if "VPROP_STRICT" in environ:
            changes["strict"] = env_flag("VPROP_STRICT", environ["VPROP_STRICT"])
        if "VPROP_DEBUG" in environ:
            changes["debug"] = env_flag("VPROP_DEBUG", environ["VPROP_DEBUG"])
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'RunnerConfig':
        return cls().with_env(environ)
