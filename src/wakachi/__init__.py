from .idioms import match_idiom_at, merge_idioms
from .nlp import NLPBackendUnavailableError, TokenizerBackend, byte_to_char_index
from .rules import RULES, MergeDecision, MergeRule, explain_merge, should_merge_forward
from .segmenter import TextSegmenter, merge_tokens, segment
from .tokens import RawToken, Segment, serialize_segments
from .vocab import Vocabulary, VocabularyStoreError, WordMarker, WordStatus

__all__ = [
    "RawToken",
    "Segment",
    "segment",
    "merge_tokens",
    "merge_idioms",
    "match_idiom_at",
    "should_merge_forward",
    "explain_merge",
    "MergeDecision",
    "MergeRule",
    "RULES",
    "TextSegmenter",
    "TokenizerBackend",
    "NLPBackendUnavailableError",
    "byte_to_char_index",
    "serialize_segments",
    "WordStatus",
    "Vocabulary",
    "WordMarker",
    "VocabularyStoreError",
]
