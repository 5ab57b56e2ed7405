from __future__ import annotations

import json
from collections import defaultdict
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Mapping

__all__ = [
    "WordStatus",
    "Vocabulary",
    "VocabularyStoreError",
    "WordMarker",
]

WordChangedCallback = Callable[[dict[str, object]], None]


class VocabularyStoreError(RuntimeError):
    """Raised when the marked-words file cannot be read or written."""


class WordStatus(str, Enum):
    IGNORED = "Ignored"
    UNSEEN = "UnSeen"
    SEARCHED = "Searched"
    TRACKING = "Tracking"
    NEVER_FORGET = "Never_Forget"

    @classmethod
    def parse(cls, value: str) -> "WordStatus":
        normalized = value.strip().replace("-", "_").lower()
        for status in cls:
            if status.value.lower() == normalized or status.name.lower() == normalized:
                return status
        raise ValueError(f"Unknown word status: {value}")


@dataclass
class Vocabulary:
    spelling: str
    status: WordStatus
    vid: int | None = None
    sid: int | None = None
    review: str | None = None

    def to_dict(self) -> dict[str, object]:
        payload = asdict(self)
        payload["status"] = self.status.value
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_dict(cls, spelling: str, entry: Mapping[str, object]) -> "Vocabulary | None":
        status_val = entry.get("status")
        if not isinstance(status_val, str):
            return None
        try:
            status = WordStatus.parse(status_val)
        except ValueError:
            return None
        vid = entry.get("vid")
        sid = entry.get("sid")
        review = entry.get("review")
        return cls(
            spelling=spelling,
            status=status,
            vid=vid if isinstance(vid, int) else None,
            sid=sid if isinstance(sid, int) else None,
            review=review if isinstance(review, str) else None,
        )


class WordMarker:
    """
    Learner status per word, keyed by base form and persisted as JSON.

    Words that were never marked are reported as ``UnSeen`` and are not
    stored.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._words: dict[str, Vocabulary] = {}
        self._listeners: dict[str, list[WordChangedCallback]] = defaultdict(list)

    def on(self, event: str, callback: WordChangedCallback) -> None:
        self._listeners[event].append(callback)

    def _emit(self, event: str, data: dict[str, object]) -> None:
        for callback in self._listeners.get(event, ()):
            callback(data)

    def load(self) -> "WordMarker":
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            self._words = {}
            return self
        except (OSError, json.JSONDecodeError) as exc:
            raise VocabularyStoreError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(raw, dict):
            raise VocabularyStoreError(f"{self.path} must contain a JSON object")
        words: dict[str, Vocabulary] = {}
        for spelling, entry in raw.items():
            if not isinstance(spelling, str) or not isinstance(entry, Mapping):
                continue
            vocabulary = Vocabulary.from_dict(spelling, entry)
            if vocabulary is not None:
                words[spelling] = vocabulary
        self._words = words
        return self

    def _persist(self) -> None:
        payload = {spelling: word.to_dict() for spelling, word in self._words.items()}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise VocabularyStoreError(f"Failed to write {self.path}: {exc}") from exc

    def has(self, spelling: str) -> bool:
        return spelling in self._words

    def get(self, spelling: str) -> Vocabulary | None:
        return self._words.get(spelling)

    def status_of(self, spelling: str) -> WordStatus:
        word = self._words.get(spelling)
        return word.status if word else WordStatus.UNSEEN

    def statuses(self, spellings: Iterable[str]) -> dict[str, str]:
        return {spelling: self.status_of(spelling).value for spelling in spellings}

    def set(self, spelling: str, status: WordStatus, sentence: str | None = None) -> Vocabulary:
        existing = self._words.get(spelling)
        old_status = existing.status if existing else None
        if existing is not None:
            word = Vocabulary(
                spelling=spelling,
                status=status,
                vid=existing.vid,
                sid=existing.sid,
                review=existing.review,
            )
        else:
            word = Vocabulary(spelling=spelling, status=status)
        self._words[spelling] = word
        self._persist()
        self._emit(
            "word_changed",
            {"new_word": word, "old_status": old_status, "sentence": sentence},
        )
        return word

    def update_word(self, spelling: str, word: Vocabulary) -> None:
        self._words[spelling] = word
        self._persist()

    def delete(self, spelling: str) -> bool:
        if spelling not in self._words:
            return False
        del self._words[spelling]
        self._persist()
        return True

    def get_all(self) -> dict[str, Vocabulary]:
        return dict(self._words)

    def counting(self) -> dict[str, int]:
        stats: dict[str, int] = {}
        for word in self._words.values():
            stats[word.status.value] = stats.get(word.status.value, 0) + 1
        return stats
