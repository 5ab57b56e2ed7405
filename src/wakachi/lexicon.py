from __future__ import annotations

import re

__all__ = [
    "POS_NOUN",
    "POS_VERB",
    "POS_PARTICLE",
    "POS_AUXILIARY",
    "POS_ADJECTIVE",
    "POS_NA_ADJECTIVE",
    "POS_PREFIX",
    "POS_SYMBOL",
    "POS_UNKNOWN",
    "SUB_SUFFIX",
    "SUB_ADVERBIAL_NOUN",
    "SUB_NA_ADJECTIVE_STEM",
    "SUB_NUMBER",
    "AUX_VERBS",
    "AUX_POLITE",
    "PROGRESSIVES",
    "TE_HELPERS",
    "LIGHT_NOMINALIZERS",
    "SENTENCE_ENDINGS",
    "COMPOUND_VERB_SUFFIXES",
    "NOUN_SUFFIXES",
    "ADJECTIVE_NOMINALIZERS",
    "HONORIFIC_SUFFIXES",
    "ADNOMINAL_ENDINGS",
    "SOKUON_CONTINUATIONS",
    "SOKUON_VERB_CONTINUATIONS",
    "PREFIXES",
    "HONORIFIC_PREFIXES",
    "COUNTERS",
    "FIXED_IDIOMS",
    "MAX_IDIOM_PARTS",
    "is_katakana",
]

# IPADIC part-of-speech tags. Other tagsets are remapped in nlp.py.
POS_NOUN = "名詞"
POS_VERB = "動詞"
POS_PARTICLE = "助詞"
POS_AUXILIARY = "助動詞"
POS_ADJECTIVE = "形容詞"
POS_NA_ADJECTIVE = "形容動詞"
POS_PREFIX = "接頭詞"
POS_SYMBOL = "記号"
POS_UNKNOWN = "UNK"

SUB_SUFFIX = "接尾"
SUB_ADVERBIAL_NOUN = "副詞可能"
SUB_NA_ADJECTIVE_STEM = "形容動詞語幹"
SUB_NUMBER = "数"

AUX_VERBS: tuple[str, ...] = (
    # passive / causative
    "れる",
    "される",
    "られる",
    "せる",
    # past / progressive
    "た",
    "てる",
    "てた",
    # listing
    "たり",
    "だり",
    # negative
    "ない",
    "なかった",
    # volitional / conjecture
    "よう",
    "まい",
    "う",
    "だろ",
    "だろう",
    # desiderative etc.
    "たい",
    "がち",
    "やすい",
)

AUX_POLITE = frozenset({"ます", "ました", "ません", "ませんでした"})

PROGRESSIVES = frozenset(
    {
        "てる",
        "ている",
        "ちゃう",
        "ちゃった",
        "じゃう",
        "じゃった",
        "ちゃ",
        "ちゃっ",
    }
)

TE_HELPERS = frozenset(
    {
        "あげる",
        "くれる",
        "もらう",
        "いく",
        "くる",
        "ください",
        "下さい",
        "いる",
    }
)

LIGHT_NOMINALIZERS = frozenset({"こと", "もの", "ところ"})

SENTENCE_ENDINGS = frozenset({"じゃん", "だよ", "だね", "だろ", "かよ"})

COMPOUND_VERB_SUFFIXES = frozenset(
    {"出す", "始める", "続ける", "終わる", "込む", "過ぎる", "直す", "変える"}
)

NOUN_SUFFIXES: tuple[str, ...] = (
    "中",
    "後",
    "前",
    "目",
    "毎",
    "式",
    "的",
    "風",
    "化",
    "感",
    "力",
    "性",
    "度",
)

ADJECTIVE_NOMINALIZERS = frozenset({"さ", "み"})

HONORIFIC_SUFFIXES = frozenset({"ちゃん", "さん", "君", "くん", "様"})

ADNOMINAL_ENDINGS = frozenset({"っぽい", "みたい", "らしい"})

# 促音便 continuations: 思っ + とく, 待っ + ちゃう ...
SOKUON_CONTINUATIONS: tuple[str, ...] = ("と", "こ", "ちゃ", "ちま", "ちゅ")
SOKUON_VERB_CONTINUATIONS: tuple[str, ...] = ("て", "た")

PREFIXES: tuple[str, ...] = ("再", "未", "超", "非", "無", "最", "新", "多")
HONORIFIC_PREFIXES: tuple[str, ...] = ("ご", "お")

COUNTERS: tuple[str, ...] = (
    "つ",
    "円",
    "人",
    "個",
    "本",
    "枚",
    "回",
    "歳",
    "才",
    "年",
    "月",
    "日",
    "時",
    "分",
    "秒",
    "匹",
    "冊",
    "台",
    "階",
    "番",
)

FIXED_IDIOMS: tuple[str, ...] = (
    "まったくもう",
    "気になる",
    "なんだ",
    "えっと",
    "気がつく",
    "気がつき",
    "どうしたの",
    "またね",
    "あらすじ",
)

# Upper bound on how many raw tokens a single idiom may span.
MAX_IDIOM_PARTS = 4

_KATAKANA_RE = re.compile(r"[ァ-ヶー－]+")


def is_katakana(text: str) -> bool:
    return bool(_KATAKANA_RE.fullmatch(text))
