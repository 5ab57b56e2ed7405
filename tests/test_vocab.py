from __future__ import annotations

import json

import pytest

from wakachi.vocab import Vocabulary, VocabularyStoreError, WordMarker, WordStatus


def test_unmarked_words_are_unseen(tmp_path) -> None:
    marker = WordMarker(tmp_path / "words.json").load()
    assert marker.status_of("食べる") is WordStatus.UNSEEN
    assert marker.statuses(["食べる", "猫"]) == {"食べる": "UnSeen", "猫": "UnSeen"}
    assert not (tmp_path / "words.json").exists()


def test_set_persists_and_notifies(tmp_path) -> None:
    path = tmp_path / "nested" / "words.json"
    marker = WordMarker(path).load()
    events: list[dict[str, object]] = []
    marker.on("word_changed", events.append)

    marker.set("食べる", WordStatus.TRACKING, "ご飯を食べる。")
    marker.set("食べる", WordStatus.NEVER_FORGET)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved == {"食べる": {"spelling": "食べる", "status": "Never_Forget"}}
    assert events[0]["old_status"] is None
    assert events[0]["sentence"] == "ご飯を食べる。"
    assert events[1]["old_status"] is WordStatus.TRACKING
    assert WordMarker(path).load().status_of("食べる") is WordStatus.NEVER_FORGET


def test_set_keeps_existing_metadata(tmp_path) -> None:
    path = tmp_path / "words.json"
    path.write_text(
        json.dumps({"猫": {"status": "Searched", "vid": 7, "review": "2024-01-01"}}),
        encoding="utf-8",
    )
    marker = WordMarker(path).load()
    word = marker.set("猫", WordStatus.TRACKING)
    assert word == Vocabulary("猫", WordStatus.TRACKING, vid=7, review="2024-01-01")


def test_update_word_replaces_record(tmp_path) -> None:
    path = tmp_path / "words.json"
    marker = WordMarker(path).load()
    marker.update_word("猫", Vocabulary("猫", WordStatus.SEARCHED, sid=3))

    assert marker.get("猫") == Vocabulary("猫", WordStatus.SEARCHED, sid=3)
    assert WordMarker(path).load().get("猫").sid == 3
    assert marker.get("犬") is None


def test_invalid_entries_are_skipped(tmp_path) -> None:
    path = tmp_path / "words.json"
    path.write_text(
        json.dumps({"猫": {"status": "bogus"}, "犬": "Tracking", "鳥": {"status": "ignored"}}),
        encoding="utf-8",
    )
    marker = WordMarker(path).load()
    assert list(marker.get_all()) == ["鳥"]
    assert marker.status_of("鳥") is WordStatus.IGNORED


def test_corrupt_store_raises(tmp_path) -> None:
    path = tmp_path / "words.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(VocabularyStoreError):
        WordMarker(path).load()
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(VocabularyStoreError):
        WordMarker(path).load()


def test_delete_and_counting(tmp_path) -> None:
    marker = WordMarker(tmp_path / "words.json").load()
    marker.set("猫", WordStatus.TRACKING)
    marker.set("犬", WordStatus.TRACKING)
    marker.set("鳥", WordStatus.IGNORED)

    assert marker.counting() == {"Tracking": 2, "Ignored": 1}
    assert marker.delete("犬") is True
    assert marker.delete("犬") is False
    assert marker.has("犬") is False
    assert marker.counting() == {"Tracking": 1, "Ignored": 1}


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Tracking", WordStatus.TRACKING),
        ("never-forget", WordStatus.NEVER_FORGET),
        ("UNSEEN", WordStatus.UNSEEN),
        (" searched ", WordStatus.SEARCHED),
    ],
)
def test_word_status_parse(value, expected) -> None:
    assert WordStatus.parse(value) is expected


def test_word_status_parse_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        WordStatus.parse("learning")
