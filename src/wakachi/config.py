from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .lexicon import MAX_IDIOM_PARTS

__all__ = [
    "ConfigError",
    "SegmenterConfig",
    "config_from_mapping",
    "default_config_path",
    "default_vocab_path",
    "load_config",
]

_CONFIG_ENV = "WAKACHI_CONFIG"
_STATE_DIR_ENV = "WAKACHI_STATE_DIR"
_TAGSETS = ("ipadic", "unidic")


class ConfigError(ValueError):
    """Raised when the configuration file holds invalid values."""


def _state_dir() -> Path:
    env_dir = os.environ.get(_STATE_DIR_ENV)
    if env_dir:
        return Path(env_dir).expanduser()
    return Path.home() / ".local" / "share" / "wakachi"


def default_vocab_path() -> Path:
    return _state_dir() / "marked_words.json"


def default_config_path() -> Path:
    env_path = os.environ.get(_CONFIG_ENV)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "wakachi" / "config.toml"


@dataclass
class SegmenterConfig:
    merge_tokens: bool = True
    extra_idioms: tuple[str, ...] = ()
    max_idiom_parts: int = MAX_IDIOM_PARTS
    tagset: str = "ipadic"
    dicdir: Path | None = None
    vocab_path: Path = field(default_factory=default_vocab_path)


def _expect(table: Mapping[str, Any], key: str, kind: type | tuple[type, ...]) -> Any:
    value = table[key]
    if isinstance(value, bool) and kind is int:
        raise ConfigError(f"segmenter.{key} must be an integer")
    if not isinstance(value, kind):
        raise ConfigError(f"segmenter.{key} has an invalid type: {type(value).__name__}")
    return value


def config_from_mapping(data: Mapping[str, Any]) -> SegmenterConfig:
    config = SegmenterConfig()
    table = data.get("segmenter", {})
    if not isinstance(table, Mapping):
        raise ConfigError("[segmenter] must be a table")
    if "merge_tokens" in table:
        config.merge_tokens = _expect(table, "merge_tokens", bool)
    if "extra_idioms" in table:
        idioms = _expect(table, "extra_idioms", list)
        if not all(isinstance(item, str) and item for item in idioms):
            raise ConfigError("segmenter.extra_idioms must be a list of non-empty strings")
        config.extra_idioms = tuple(idioms)
    if "max_idiom_parts" in table:
        parts = _expect(table, "max_idiom_parts", int)
        if parts < 1:
            raise ConfigError("segmenter.max_idiom_parts must be >= 1")
        config.max_idiom_parts = parts
    if "tagset" in table:
        tagset = _expect(table, "tagset", str)
        if tagset not in _TAGSETS:
            raise ConfigError(f"segmenter.tagset must be one of {', '.join(_TAGSETS)}")
        config.tagset = tagset
    if "dicdir" in table:
        config.dicdir = Path(_expect(table, "dicdir", str)).expanduser()
    if "vocab_path" in table:
        config.vocab_path = Path(_expect(table, "vocab_path", str)).expanduser()
    return config


def load_config(path: Path | None = None) -> SegmenterConfig:
    """
    Load ``[segmenter]`` settings from a TOML file.

    An explicitly given path must exist; the default location is optional and
    silently falls back to built-in defaults.
    """
    explicit = path is not None
    config_path = path if path is not None else default_config_path()
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}") from None
        return SegmenterConfig()
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc
    return config_from_mapping(data)
