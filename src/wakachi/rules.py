"""
Forward-merge decisions for adjacent (segment, token) pairs.

Every rule looks at the segment accumulated so far and the next raw token and
either returns a :class:`MergeDecision` or ``None`` to let the next rule
speak. Rules are consulted in table order and the first decision wins, even
when that decision is "do not merge". Several pairs are matched by more than
one rule with different outcomes, so the order of ``RULES`` is part of the
behaviour.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Protocol

from .lexicon import (
    ADJECTIVE_NOMINALIZERS,
    ADNOMINAL_ENDINGS,
    AUX_POLITE,
    AUX_VERBS,
    COMPOUND_VERB_SUFFIXES,
    COUNTERS,
    HONORIFIC_PREFIXES,
    HONORIFIC_SUFFIXES,
    LIGHT_NOMINALIZERS,
    NOUN_SUFFIXES,
    POS_ADJECTIVE,
    POS_AUXILIARY,
    POS_NA_ADJECTIVE,
    POS_NOUN,
    POS_PARTICLE,
    POS_PREFIX,
    POS_SYMBOL,
    POS_UNKNOWN,
    POS_VERB,
    PREFIXES,
    PROGRESSIVES,
    SENTENCE_ENDINGS,
    SOKUON_CONTINUATIONS,
    SOKUON_VERB_CONTINUATIONS,
    SUB_ADVERBIAL_NOUN,
    SUB_NA_ADJECTIVE_STEM,
    SUB_NUMBER,
    SUB_SUFFIX,
    TE_HELPERS,
    is_katakana,
)

__all__ = [
    "MergeDecision",
    "MergeRule",
    "NO_MERGE",
    "RULES",
    "should_merge_forward",
    "explain_merge",
]


class _TokenLike(Protocol):
    surface_form: str
    base_form: str
    pos: str
    pos_sub1: str
    is_word_like: bool


@dataclass(frozen=True, slots=True)
class MergeDecision:
    merge: bool
    base_form: str | None = None


NO_MERGE = MergeDecision(merge=False)

RuleCheck = Callable[[_TokenLike, _TokenLike], MergeDecision | None]


@dataclass(frozen=True, slots=True)
class MergeRule:
    name: str
    check: RuleCheck


def _merge(base_form: str) -> MergeDecision:
    return MergeDecision(merge=True, base_form=base_form)


_LAUGH_RE = re.compile(r"w{1,5}")
_EXPLANATORY_RE = re.compile(r"[んえ]だ")
_NUMERAL_RE = re.compile(r"[0-9０-９]+")


def _prefix_exclusion(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    # Bare お only ever attaches to a noun.
    if prev.surface_form == "お" and curr.pos != POS_NOUN:
        return NO_MERGE
    return None


def _polite_or_progressive(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos != POS_VERB:
        return None
    if curr.surface_form in AUX_POLITE or curr.surface_form in PROGRESSIVES:
        return _merge(prev.base_form)
    return None


def _te_chain(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos == POS_VERB and curr.surface_form == "て" and curr.pos == POS_PARTICLE:
        return _merge(prev.base_form)
    if prev.surface_form.endswith("て") and curr.surface_form in TE_HELPERS:
        return _merge(prev.base_form)
    return None


def _light_nominalizer(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos == POS_VERB and curr.surface_form in LIGHT_NOMINALIZERS:
        return _merge(prev.base_form + curr.base_form)
    return None


def _sentence_ending(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if curr.surface_form in SENTENCE_ENDINGS and prev.pos != POS_SYMBOL:
        return _merge(prev.base_form)
    return None


def _long_vowel_mark(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if curr.surface_form == "ー" and is_katakana(prev.surface_form):
        return _merge(prev.base_form)
    return None


def _laugh_filler(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if _LAUGH_RE.fullmatch(curr.surface_form):
        return _merge(prev.base_form)
    return None


def _verb_morphology(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    surface = curr.surface_form
    if prev.pos == POS_VERB and (curr.pos == POS_AUXILIARY or curr.pos_sub1 == SUB_SUFFIX):
        return _merge(prev.base_form)
    if surface == "う":
        if prev.pos == POS_VERB and prev.surface_form.endswith(("い", "え")):
            return _merge(prev.base_form)
        if prev.surface_form.endswith(("ましょ", "でしょ")):
            return _merge(prev.base_form)
        return None
    if surface in AUX_VERBS and prev.is_word_like:
        return _merge(prev.base_form)
    return None


def _contracted_endings(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    # 食べれ + る, 見て + た
    if prev.surface_form.endswith("れ") and curr.surface_form == "る":
        return _merge(prev.base_form)
    if prev.surface_form.endswith("て") and curr.surface_form in ("た", "だ"):
        return _merge(prev.base_form)
    return None


def _compound_verb(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    # 走り + 出す keeps the historical "走る出す" base form.
    if (
        prev.pos == POS_VERB
        and curr.pos == POS_VERB
        and curr.base_form in COMPOUND_VERB_SUFFIXES
    ):
        return _merge(prev.base_form + curr.base_form)
    return None


def _noun_suffix(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos != POS_NOUN:
        return None
    base = prev.base_form or prev.surface_form
    if curr.surface_form in NOUN_SUFFIXES:
        return _merge(base + curr.base_form)
    if (
        curr.pos_sub1 == SUB_SUFFIX
        and curr.surface_form not in HONORIFIC_SUFFIXES
        and prev.pos_sub1 != SUB_ADVERBIAL_NOUN
    ):
        return _merge(base + curr.base_form)
    return None


def _adjective_nominalizer(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos == POS_ADJECTIVE and curr.surface_form in ADJECTIVE_NOMINALIZERS:
        return _merge(prev.base_form + curr.base_form)
    return None


def _na_adjective_copula(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    # The copula is absorbed: 静か + じゃ + ない stays 静かだ.
    if prev.pos == POS_NA_ADJECTIVE and (
        curr.pos == POS_AUXILIARY or curr.surface_form == "じゃない"
    ):
        return _merge(prev.base_form)
    return None


def _noun_as_na_adjective(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if (
        prev.pos == POS_NOUN
        and prev.pos_sub1 == SUB_NA_ADJECTIVE_STEM
        and curr.surface_form == "な"
        and curr.pos == POS_AUXILIARY
    ):
        return _merge(prev.base_form)
    return None


def _honorific_suffix(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if curr.pos_sub1 == SUB_SUFFIX and curr.surface_form in HONORIFIC_SUFFIXES:
        return _merge(prev.base_form)
    return None


def _adnominal_ending(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if curr.surface_form in ADNOMINAL_ENDINGS and prev.pos != POS_SYMBOL:
        return _merge(prev.base_form)
    return None


def _sokuon_continuation(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if not prev.surface_form.endswith("っ"):
        return None
    if curr.surface_form in SOKUON_CONTINUATIONS:
        return _merge(prev.base_form)
    if prev.pos == POS_VERB and curr.surface_form in SOKUON_VERB_CONTINUATIONS:
        return _merge(prev.base_form)
    return None


def _prefix_attachment(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    is_plain_prefix = prev.surface_form in PREFIXES or (
        prev.pos == POS_PREFIX and prev.surface_form not in HONORIFIC_PREFIXES
    )
    if is_plain_prefix and curr.pos in (POS_NOUN, POS_VERB):
        return _merge(prev.base_form + curr.base_form)
    # お + 名前 is looked up as 名前.
    if prev.surface_form in HONORIFIC_PREFIXES and curr.pos == POS_NOUN:
        return _merge(curr.base_form)
    return None


def _katakana_suru(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if prev.pos == POS_NOUN and is_katakana(prev.surface_form) and curr.surface_form == "する":
        return _merge(prev.base_form)
    return None


def _explanatory_ending(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if _EXPLANATORY_RE.match(curr.surface_form) and prev.pos in (
        POS_ADJECTIVE,
        POS_VERB,
        POS_NOUN,
    ):
        return _merge(prev.base_form)
    return None


def _particle_stop(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if curr.pos == POS_PARTICLE:
        return NO_MERGE
    return None


def _is_numeral(token: _TokenLike) -> bool:
    if token.pos_sub1 == SUB_NUMBER:
        return True
    return token.pos == POS_UNKNOWN and bool(_NUMERAL_RE.fullmatch(token.surface_form))


def _numeral_counter(prev: _TokenLike, curr: _TokenLike) -> MergeDecision | None:
    if _is_numeral(prev) and curr.surface_form in COUNTERS:
        return _merge((prev.base_form or prev.surface_form) + curr.base_form)
    return None


RULES: tuple[MergeRule, ...] = (
    MergeRule("prefix-exclusion", _prefix_exclusion),
    MergeRule("polite-progressive", _polite_or_progressive),
    MergeRule("te-chain", _te_chain),
    MergeRule("light-nominalizer", _light_nominalizer),
    MergeRule("sentence-ending", _sentence_ending),
    MergeRule("long-vowel-mark", _long_vowel_mark),
    MergeRule("laugh-filler", _laugh_filler),
    MergeRule("verb-morphology", _verb_morphology),
    MergeRule("contracted-ending", _contracted_endings),
    MergeRule("compound-verb", _compound_verb),
    MergeRule("noun-suffix", _noun_suffix),
    MergeRule("adjective-nominalizer", _adjective_nominalizer),
    MergeRule("na-adjective-copula", _na_adjective_copula),
    MergeRule("noun-as-na-adjective", _noun_as_na_adjective),
    MergeRule("honorific-suffix", _honorific_suffix),
    MergeRule("adnominal-ending", _adnominal_ending),
    MergeRule("sokuon-continuation", _sokuon_continuation),
    MergeRule("prefix-attachment", _prefix_attachment),
    MergeRule("katakana-suru", _katakana_suru),
    MergeRule("explanatory-ending", _explanatory_ending),
    MergeRule("particle-stop", _particle_stop),
    MergeRule("numeral-counter", _numeral_counter),
)


def explain_merge(
    prev: _TokenLike,
    curr: _TokenLike,
    rules: tuple[MergeRule, ...] = RULES,
) -> tuple[str | None, MergeDecision]:
    """Return the name of the deciding rule (``None`` for the default) and its decision."""
    for rule in rules:
        decision = rule.check(prev, curr)
        if decision is not None:
            return rule.name, decision
    return None, NO_MERGE


def should_merge_forward(
    prev: _TokenLike,
    curr: _TokenLike,
    rules: tuple[MergeRule, ...] = RULES,
) -> MergeDecision:
    return explain_merge(prev, curr, rules)[1]
