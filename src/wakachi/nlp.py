from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Sequence

from .lexicon import POS_SYMBOL
from .tokens import RawToken
from .tools import get_dicdir, mecab_args

__all__ = [
    "NLPBackendUnavailableError",
    "TokenizerBackend",
    "UNIDIC_POS_MAP",
    "byte_to_char_index",
    "map_unidic_pos",
    "rebase_byte_offsets",
]


class NLPBackendUnavailableError(RuntimeError):
    """Raised when the MeCab tagger or its dictionary cannot be initialized."""


_IPADIC_FIELDS = ("pos", "pos1", "pos2", "pos3", "cType", "cForm", "base", "reading", "pron")

# UniDic coarse POS -> IPADIC (pos, pos_sub1). The merge rules are keyed on
# IPADIC tags, so every other tagset has to pass through a table like this.
UNIDIC_POS_MAP: dict[str, tuple[str, str]] = {
    "名詞": ("名詞", "一般"),
    "代名詞": ("名詞", "代名詞"),
    "形状詞": ("名詞", "形容動詞語幹"),
    "動詞": ("動詞", "自立"),
    "形容詞": ("形容詞", "自立"),
    "助動詞": ("助動詞", "*"),
    "助詞": ("助詞", "*"),
    "副詞": ("副詞", "一般"),
    "連体詞": ("連体詞", "*"),
    "接続詞": ("接続詞", "*"),
    "感動詞": ("感動詞", "*"),
    "接頭辞": ("接頭詞", "名詞接続"),
    "接尾辞": ("名詞", "接尾"),
    "補助記号": ("記号", "一般"),
    "記号": ("記号", "一般"),
    "空白": ("記号", "空白"),
}

# Finer (pos1, pos2) overrides on top of UNIDIC_POS_MAP.
_UNIDIC_SUB_MAP: dict[tuple[str, str], tuple[str, str]] = {
    ("名詞", "固有名詞"): ("名詞", "固有名詞"),
    ("名詞", "数詞"): ("名詞", "数"),
    ("名詞", "助動詞語幹"): ("名詞", "特殊"),
    ("形状詞", "助動詞語幹"): ("名詞", "特殊"),
    ("動詞", "非自立可能"): ("動詞", "非自立"),
    ("形容詞", "非自立可能"): ("形容詞", "非自立"),
    ("接尾辞", "動詞的"): ("動詞", "接尾"),
    ("接尾辞", "形容詞的"): ("形容詞", "接尾"),
}

_UNIDIC_NOUN_TYPE_MAP = {
    "サ変可能": "サ変接続",
    "形状詞可能": "形容動詞語幹",
    "副詞可能": "副詞可能",
}


def map_unidic_pos(pos1: str, pos2: str = "", pos3: str = "") -> tuple[str, str]:
    override = _UNIDIC_SUB_MAP.get((pos1, pos2))
    if override is not None:
        return override
    if pos1 == "名詞" and pos2 == "普通名詞":
        return "名詞", _UNIDIC_NOUN_TYPE_MAP.get(pos3, "一般")
    if pos1 == "助詞" and pos2 and pos2 != "*":
        return "助詞", pos2
    mapped = UNIDIC_POS_MAP.get(pos1)
    if mapped is not None:
        return mapped
    return pos1 or "", pos2 or ""


def byte_to_char_index(text: str, byte_index: int) -> int:
    """
    Convert a UTF-8 byte offset into ``text`` to a character index.

    An offset that lands inside a multi-byte sequence resolves to the start
    of that character; an offset equal to the running byte count resolves to
    the character right after it.
    """
    if byte_index < 0:
        return -1
    if byte_index == 0:
        return 0
    byte_count = 0
    for char_index, ch in enumerate(text):
        code_point = ord(ch)
        if code_point <= 0x7F:
            byte_count += 1
        elif code_point <= 0x7FF:
            byte_count += 2
        elif code_point <= 0xFFFF:
            byte_count += 3
        else:
            byte_count += 4
        if byte_count > byte_index:
            return char_index
        if byte_count == byte_index:
            return char_index + 1
    return len(text)


def rebase_byte_offsets(text: str, tokens: Iterable[RawToken]) -> list[RawToken]:
    """Turn tokens carrying UTF-8 byte spans into tokens carrying character spans."""
    rebased: list[RawToken] = []
    for token in tokens:
        if token.start_index is None or token.end_index is None:
            rebased.append(token)
            continue
        rebased.append(
            token.with_span(
                byte_to_char_index(text, token.start_index),
                byte_to_char_index(text, token.end_index),
            )
        )
    return rebased


def _clean(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if text == "*":
        return ""
    return text


def _feature_attr(feature: Any, names: Sequence[str]) -> str:
    for name in names:
        if hasattr(feature, name):
            value = _clean(getattr(feature, name))
        else:
            try:
                value = _clean(feature[name])
            except (KeyError, IndexError, TypeError):
                value = ""
        if value:
            return value
    return ""


class TokenizerBackend:
    """Fugashi (MeCab) backend producing :class:`RawToken` streams."""

    def __init__(
        self,
        tagset: str = "ipadic",
        dicdir: Path | None = None,
        tagger: Callable[[str], Iterable[Any]] | None = None,
    ) -> None:
        if tagset not in ("ipadic", "unidic"):
            raise ValueError(f"Unsupported tagset: {tagset}")
        self.tagset = tagset
        self._lock = threading.Lock()
        if tagger is not None:
            self._tagger = tagger
            return
        try:
            from fugashi import GenericTagger, Tagger  # type: ignore
        except ImportError as exc:
            raise NLPBackendUnavailableError(
                "Segmentation requires 'fugashi' (MeCab) to be installed."
            ) from exc

        resolved = get_dicdir(tagset, dicdir)
        if resolved is None:
            raise NLPBackendUnavailableError(
                f"No {tagset} dictionary found; install the '{tagset}' package "
                "or set WAKACHI_MECAB_DICDIR."
            )
        args = mecab_args(resolved)
        try:
            if tagset == "unidic":
                self._tagger = Tagger(args)
            else:
                self._tagger = GenericTagger(args)
        except RuntimeError as exc:
            raise NLPBackendUnavailableError(
                f"Failed to initialize MeCab dictionary at '{resolved}': {exc}"
            ) from exc

    def tokenize(self, text: str) -> list[RawToken]:
        tokens: list[RawToken] = []
        if not text:
            return tokens
        cursor = 0
        # MeCab nodes point into the tagger's shared lattice.
        with self._lock:
            for raw in self._tagger(text):
                surface = getattr(raw, "surface", "")
                if not surface:
                    continue
                start = text.find(surface, cursor)
                if start == -1:
                    start = cursor
                end = start + len(surface)
                tokens.append(self._build_token(raw, surface, start, end))
                cursor = end
        return tokens

    def _build_token(self, raw: Any, surface: str, start: int, end: int) -> RawToken:
        if self.tagset == "unidic":
            pos, pos_sub1, base, reading = self._unidic_fields(raw)
        else:
            pos, pos_sub1, base, reading = self._ipadic_fields(raw)
        return RawToken(
            surface_form=surface,
            base_form=base or surface,
            start_index=start,
            end_index=end,
            reading=reading,
            pos=pos,
            pos_sub1=pos_sub1 or "*",
            is_word_like=pos != POS_SYMBOL and bool(surface.strip()),
        )

    def _ipadic_fields(self, raw: Any) -> tuple[str, str, str, str]:
        feature = getattr(raw, "feature", None)
        if feature is None:
            return "", "", "", ""
        if isinstance(feature, str):
            values: list[Any] = feature.split(",")
        elif hasattr(feature, "_fields"):
            values = [getattr(feature, name, "") for name in feature._fields]
        else:
            values = list(feature)
        fields = dict(zip(_IPADIC_FIELDS, values))
        return (
            _clean(fields.get("pos")),
            _clean(fields.get("pos1")),
            _clean(fields.get("base")),
            _clean(fields.get("reading")),
        )

    def _unidic_fields(self, raw: Any) -> tuple[str, str, str, str]:
        feature = getattr(raw, "feature", None)
        if feature is None:
            return "", "", "", ""
        pos, pos_sub1 = map_unidic_pos(
            _feature_attr(feature, ("pos1",)),
            _feature_attr(feature, ("pos2",)),
            _feature_attr(feature, ("pos3",)),
        )
        base = _feature_attr(feature, ("orthBase", "lemma"))
        reading = _feature_attr(feature, ("kana", "pron"))
        return pos, pos_sub1, base, reading
