from __future__ import annotations

from typing import Iterable, Sequence

from .lexicon import FIXED_IDIOMS, MAX_IDIOM_PARTS
from .tokens import RawToken

__all__ = ["merge_idioms", "match_idiom_at"]


def match_idiom_at(
    tokens: Sequence[RawToken],
    index: int,
    idioms: Iterable[str] = FIXED_IDIOMS,
    max_parts: int = MAX_IDIOM_PARTS,
) -> list[RawToken] | None:
    """
    Return the tokens of the longest idiom starting at ``index``.

    For each idiom, surfaces are concatenated from ``index`` until the text
    is at least as long as the idiom or ``max_parts`` tokens were taken; the
    idiom matches only on exact equality. When several idioms match, the one
    consuming the most tokens wins.
    """
    best: list[RawToken] | None = None
    for idiom in idioms:
        if not idiom:
            continue
        cursor = index
        surface = ""
        consumed: list[RawToken] = []
        while cursor < len(tokens) and len(surface) < len(idiom) and len(consumed) < max_parts:
            token = tokens[cursor]
            surface += token.surface_form
            consumed.append(token)
            cursor += 1
        if surface == idiom and (best is None or len(consumed) > len(best)):
            best = consumed
    return best


def _fuse(parts: Sequence[RawToken]) -> RawToken:
    first = parts[0]
    last = parts[-1]
    text = "".join(part.surface_form for part in parts)
    return RawToken(
        surface_form=text,
        base_form=text,
        start_index=first.start_index,
        end_index=last.end_index,
        reading="".join(part.reading for part in parts),
        # The trailing morpheme decides how the idiom behaves in later merges.
        pos=last.pos,
        pos_sub1=last.pos_sub1,
        is_word_like=True,
    )


def merge_idioms(
    tokens: Sequence[RawToken],
    idioms: Iterable[str] = FIXED_IDIOMS,
    max_parts: int = MAX_IDIOM_PARTS,
) -> list[RawToken]:
    idiom_list = tuple(idioms)
    result: list[RawToken] = []
    index = 0
    while index < len(tokens):
        match = match_idiom_at(tokens, index, idiom_list, max_parts)
        if match:
            result.append(_fuse(match))
            index += len(match)
        else:
            result.append(tokens[index])
            index += 1
    return result
