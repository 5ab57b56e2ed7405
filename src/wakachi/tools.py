from __future__ import annotations

import importlib
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "DictionaryStatus",
    "describe_dictionary",
    "get_dicdir",
    "mecab_args",
]

_DICDIR_ENV = "WAKACHI_MECAB_DICDIR"
_DICTIONARY_MODULES = {
    "ipadic": ("ipadic",),
    "unidic": ("unidic", "unidic_lite"),
}


@dataclass(slots=True)
class DictionaryStatus:
    tagset: str
    available: bool
    path: Path | None
    source: str | None
    detail: str | None = None


def _is_dicdir(path: Path) -> bool:
    return (path / "dicrc").exists()


def _module_dicdir(module_name: str) -> Path | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    dicdir = getattr(module, "DICDIR", None)
    if not dicdir:
        return None
    candidate = Path(dicdir)
    if _is_dicdir(candidate):
        return candidate
    return None


def _resolve(tagset: str, override: Path | None) -> tuple[Path | None, str | None]:
    env_dir = os.environ.get(_DICDIR_ENV)
    if env_dir:
        candidate = Path(env_dir).expanduser()
        if _is_dicdir(candidate):
            return candidate, _DICDIR_ENV
    if override is not None:
        candidate = override.expanduser()
        if _is_dicdir(candidate):
            return candidate, "config"
    for module_name in _DICTIONARY_MODULES.get(tagset, ()):
        dicdir = _module_dicdir(module_name)
        if dicdir is not None:
            return dicdir, module_name
    return None, None


def get_dicdir(tagset: str = "ipadic", override: Path | None = None) -> Path | None:
    return _resolve(tagset, override)[0]


def describe_dictionary(tagset: str = "ipadic", override: Path | None = None) -> DictionaryStatus:
    dicdir, source = _resolve(tagset, override)
    detail = None
    if dicdir is None:
        packages = " or ".join(_DICTIONARY_MODULES.get(tagset, ())) or "a MeCab dictionary"
        detail = f"Install {packages} or set {_DICDIR_ENV}."
    return DictionaryStatus(
        tagset=tagset,
        available=dicdir is not None,
        path=dicdir,
        source=source,
        detail=detail,
    )


def mecab_args(dicdir: Path) -> str:
    # -r keeps MeCab from requiring a system-wide mecabrc.
    return f"-r {shlex.quote(os.devnull)} -d {shlex.quote(str(dicdir))}"
