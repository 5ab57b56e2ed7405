from __future__ import annotations

from pathlib import Path

import pytest

from wakachi.config import ConfigError, SegmenterConfig, default_vocab_path, load_config
from wakachi.lexicon import MAX_IDIOM_PARTS


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(body, encoding="utf-8")
    return path


def test_load_config_reads_segmenter_table(tmp_path) -> None:
    path = _write(
        tmp_path,
        """
[segmenter]
merge_tokens = false
extra_idioms = ["お疲れ様"]
max_idiom_parts = 6
tagset = "unidic"
dicdir = "/opt/unidic"
vocab_path = "words.json"
""",
    )
    config = load_config(path)
    assert config.merge_tokens is False
    assert config.extra_idioms == ("お疲れ様",)
    assert config.max_idiom_parts == 6
    assert config.tagset == "unidic"
    assert config.dicdir == Path("/opt/unidic")
    assert config.vocab_path == Path("words.json")


def test_missing_default_config_uses_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("WAKACHI_CONFIG", str(tmp_path / "absent.toml"))
    monkeypatch.setenv("WAKACHI_STATE_DIR", str(tmp_path / "state"))
    config = load_config()
    assert config == SegmenterConfig()
    assert config.max_idiom_parts == MAX_IDIOM_PARTS
    assert config.vocab_path == tmp_path / "state" / "marked_words.json"
    assert default_vocab_path() == config.vocab_path


def test_env_points_at_config(monkeypatch, tmp_path) -> None:
    path = _write(tmp_path, '[segmenter]\ntagset = "unidic"\n')
    monkeypatch.setenv("WAKACHI_CONFIG", str(path))
    assert load_config().tagset == "unidic"


def test_missing_explicit_config_raises(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.toml")


@pytest.mark.parametrize(
    "body",
    [
        "[segmenter\n",
        "segmenter = 3\n",
        "[segmenter]\nmerge_tokens = 'yes'\n",
        "[segmenter]\nmax_idiom_parts = true\n",
        "[segmenter]\nmax_idiom_parts = 0\n",
        "[segmenter]\nextra_idioms = ['', 'x']\n",
        "[segmenter]\ntagset = 'jumandic'\n",
    ],
)
def test_invalid_config_is_rejected(tmp_path, body) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, body))
