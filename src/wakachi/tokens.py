from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping

__all__ = [
    "RawToken",
    "Segment",
    "serialize_segments",
    "deserialize_tokens",
]


@dataclass(frozen=True)
class RawToken:
    """
    One morpheme as reported by the morphological analyzer.

    Offsets are character (code point) indices into the analysed text span,
    end-exclusive. They may be missing when the analyzer did not report them;
    the assembler repairs them on output.
    """

    surface_form: str
    base_form: str
    start_index: int | None = None
    end_index: int | None = None
    reading: str = ""
    pos: str = ""
    pos_sub1: str = ""
    is_word_like: bool = True

    def with_span(self, start: int, end: int) -> "RawToken":
        return replace(self, start_index=start, end_index=end)


@dataclass
class Segment:
    """
    A learner-facing word unit, possibly built from several raw tokens.

    ``pos`` and ``pos_sub1`` always describe the most recently absorbed
    token, since that is what governs the next merge decision.
    """

    surface_form: str
    base_form: str
    start_index: int | None = None
    end_index: int | None = None
    reading: str = ""
    pos: str = ""
    pos_sub1: str = ""
    is_word_like: bool = True

    @classmethod
    def from_token(cls, token: RawToken) -> "Segment":
        return cls(
            surface_form=token.surface_form,
            base_form=token.base_form,
            start_index=token.start_index,
            end_index=token.end_index,
            reading=token.reading,
            pos=token.pos,
            pos_sub1=token.pos_sub1,
            is_word_like=token.is_word_like,
        )

    def absorb(self, token: RawToken, base_form: str | None) -> None:
        if base_form is not None:
            self.base_form = base_form
        self.surface_form += token.surface_form
        self.end_index = token.end_index
        self.reading += token.reading
        self.pos = token.pos
        self.pos_sub1 = token.pos_sub1
        self.is_word_like = True

    def span(self) -> tuple[int, int]:
        start = self.start_index or 0
        end = self.end_index if self.end_index is not None else start + len(self.surface_form)
        return start, end


def serialize_segments(
    segments: Iterable[Segment],
    statuses: Mapping[str, str] | None = None,
) -> list[dict[str, object]]:
    payload: list[dict[str, object]] = []
    for segment in segments:
        start, end = segment.span()
        entry: dict[str, object] = {
            "surfaceForm": segment.surface_form,
            "baseForm": segment.base_form,
            "startIndex": start,
            "endIndex": end,
            "reading": segment.reading,
            "pos": segment.pos,
            "posSub1": segment.pos_sub1,
            "isWordLike": segment.is_word_like,
        }
        if statuses is not None:
            entry["status"] = statuses.get(segment.base_form)
        payload.append(entry)
    return payload


def _optional_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def _optional_str(value: object) -> str:
    return value if isinstance(value, str) else ""


def deserialize_tokens(data: Iterable[Mapping[str, object]]) -> list[RawToken]:
    tokens: list[RawToken] = []
    for entry in data:
        if not isinstance(entry, Mapping):
            continue
        surface = entry.get("surfaceForm")
        if not isinstance(surface, str):
            continue
        base = entry.get("baseForm")
        if not isinstance(base, str):
            base = surface
        start = _optional_int(entry.get("startIndex"))
        end = _optional_int(entry.get("endIndex"))
        if start is not None and end is not None and end < start:
            start, end = None, None
        word_like = entry.get("isWordLike")
        tokens.append(
            RawToken(
                surface_form=surface,
                base_form=base,
                start_index=start,
                end_index=end,
                reading=_optional_str(entry.get("reading")),
                pos=_optional_str(entry.get("pos")),
                pos_sub1=_optional_str(entry.get("posSub1")),
                is_word_like=word_like if isinstance(word_like, bool) else True,
            )
        )
    return tokens
