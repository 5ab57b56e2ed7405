"""
Learner-friendly segmentation of a morpheme stream.

The morphological analyzer splits 食べられなかった into five pieces; a
learner wants one word with the lookup key 食べる. ``merge_tokens`` runs
the idiom pass and then folds the tokens left to right, asking the rule
table in :mod:`wakachi.rules` whether each token belongs to the segment
built so far.
"""

from __future__ import annotations

import threading
from typing import Iterable, Sequence

from .config import SegmenterConfig
from .idioms import merge_idioms
from .lexicon import FIXED_IDIOMS, MAX_IDIOM_PARTS
from .logging_utils import debug_enabled, debug_log
from .nlp import TokenizerBackend
from .rules import RULES, MergeRule, explain_merge
from .tokens import RawToken, Segment

__all__ = [
    "TextSegmenter",
    "merge_tokens",
    "segment",
    "tokens_as_segments",
]


def _finalize(segment: Segment) -> Segment:
    start = segment.start_index
    if start is None or start < 0:
        start = 0
    end = segment.end_index
    if end is None or end < start:
        end = start + len(segment.surface_form)
    segment.start_index = start
    segment.end_index = end
    if segment.is_word_like and not segment.base_form:
        segment.base_form = segment.surface_form
    return segment


def merge_tokens(
    tokens: Sequence[RawToken],
    idioms: Iterable[str] = FIXED_IDIOMS,
    max_idiom_parts: int = MAX_IDIOM_PARTS,
    rules: tuple[MergeRule, ...] = RULES,
) -> list[Segment]:
    merged: list[Segment] = []
    current: Segment | None = None
    trace = debug_enabled()
    for token in merge_idioms(tokens, idioms, max_idiom_parts):
        if current is None:
            current = Segment.from_token(token)
            continue
        rule_name, decision = explain_merge(current, token, rules)
        if trace:
            verdict = "merge" if decision.merge else "split"
            debug_log(
                f"{current.surface_form}|{token.surface_form}: {verdict} ({rule_name or 'default'})"
            )
        if decision.merge:
            current.absorb(token, decision.base_form)
            continue
        merged.append(current)
        current = Segment.from_token(token)
    if current is not None:
        merged.append(current)
    return [_finalize(item) for item in merged]


def segment(tokens: Sequence[RawToken]) -> list[Segment]:
    return merge_tokens(tokens)


def tokens_as_segments(tokens: Iterable[RawToken]) -> list[Segment]:
    """Wrap raw tokens one-to-one, for callers that disabled merging."""
    return [_finalize(Segment.from_token(token)) for token in tokens]


class TextSegmenter:
    """Tokenize text with a backend and turn the morphemes into segments."""

    def __init__(
        self,
        backend: TokenizerBackend | None = None,
        config: SegmenterConfig | None = None,
    ) -> None:
        self.config = config or SegmenterConfig()
        self._backend = backend
        self._backend_lock = threading.Lock()
        self._idioms = FIXED_IDIOMS + tuple(
            idiom for idiom in self.config.extra_idioms if idiom not in FIXED_IDIOMS
        )

    @property
    def backend(self) -> TokenizerBackend:
        if self._backend is None:
            with self._backend_lock:
                if self._backend is None:
                    self._backend = TokenizerBackend(
                        tagset=self.config.tagset, dicdir=self.config.dicdir
                    )
        return self._backend

    def merge(self, tokens: Sequence[RawToken], merge: bool | None = None) -> list[Segment]:
        should_merge = self.config.merge_tokens if merge is None else merge
        if not should_merge:
            return tokens_as_segments(tokens)
        return merge_tokens(tokens, self._idioms, self.config.max_idiom_parts)

    def segment(self, text: str, merge: bool | None = None) -> list[Segment]:
        return self.merge(self.backend.tokenize(text), merge)
