from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import pytest

import wakachi.cli as cli
from wakachi.nlp import TokenizerBackend
from wakachi.segmenter import TextSegmenter
from wakachi.tools import DictionaryStatus


@dataclass
class _StubNode:
    surface: str
    feature: str


_FEATURES = {
    "猫": "名詞,一般,*,*,*,*,猫,ネコ,ネコ",
    "が": "助詞,格助詞,一般,*,*,*,が,ガ,ガ",
    "食べ": "動詞,自立,*,*,一段,連用形,食べる,タベ,タベ",
    "ます": "助動詞,*,*,*,特殊・マス,基本形,ます,マス,マス",
}


def _tagger(text: str) -> list[_StubNode]:
    nodes: list[_StubNode] = []
    cursor = 0
    while cursor < len(text):
        for surface, feature in _FEATURES.items():
            if text.startswith(surface, cursor):
                nodes.append(_StubNode(surface, feature))
                cursor += len(surface)
                break
        else:
            cursor += 1
    return nodes


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch, tmp_path):
    monkeypatch.setenv("WAKACHI_CONFIG", str(tmp_path / "missing-config.toml"))
    monkeypatch.setenv("WAKACHI_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.delenv("WAKACHI_MECAB_DICDIR", raising=False)


@pytest.fixture
def stub_segmenter(monkeypatch):
    def _factory(config=None):
        return TextSegmenter(backend=TokenizerBackend(tagger=_tagger), config=config)

    monkeypatch.setattr(cli, "TextSegmenter", _factory)


def _write_tokens(tmp_path: Path) -> Path:
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps(
            [
                {"surfaceForm": "食べ", "baseForm": "食べる", "startIndex": 0, "endIndex": 2, "pos": "動詞", "posSub1": "自立"},
                {"surfaceForm": "ます", "baseForm": "ます", "startIndex": 2, "endIndex": 4, "pos": "助動詞", "posSub1": "*"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


def test_segment_tokens_file_as_json(tmp_path, capsys) -> None:
    exit_code = cli.main(["segment", "--tokens", str(_write_tokens(tmp_path)), "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload) == 1
    assert payload[0]["surfaceForm"] == "食べます"
    assert payload[0]["baseForm"] == "食べる"
    assert payload[0]["status"] == "UnSeen"


def test_segment_tokens_without_merging(tmp_path, capsys) -> None:
    cli.main(["--tokens", str(_write_tokens(tmp_path)), "--json", "--no-merge"])
    payload = json.loads(capsys.readouterr().out)
    assert [item["surfaceForm"] for item in payload] == ["食べ", "ます"]


def test_segment_text_renders_table(stub_segmenter, capsys) -> None:
    exit_code = cli.main(["segment", "猫が食べます"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "食べます" in out
    assert "食べる" in out
    assert "UnSeen" in out


def test_segment_reads_file(stub_segmenter, tmp_path, capsys) -> None:
    source = tmp_path / "input.txt"
    source.write_text("猫が", encoding="utf-8")
    cli.main(["segment", "-f", str(source), "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert [item["surfaceForm"] for item in payload] == ["猫", "が"]


def test_segment_html_groups_by_text_node(stub_segmenter, tmp_path, capsys) -> None:
    source = tmp_path / "page.html"
    source.write_text("<p>猫が<b>食べます</b></p><script>猫</script>", encoding="utf-8")
    cli.main(["segment", "-f", str(source), "--html", "--json"])
    payload = json.loads(capsys.readouterr().out)
    assert [(node["parent"], node["text"]) for node in payload] == [("p", "猫が"), ("b", "食べます")]
    assert payload[1]["segments"][0]["baseForm"] == "食べる"


def test_segment_reports_status_from_vocab(stub_segmenter, tmp_path, capsys) -> None:
    vocab = tmp_path / "words.json"
    cli.main(["mark", "食べる", "tracking", "--vocab", str(vocab)])
    capsys.readouterr()

    cli.main(["segment", "食べます", "--json", "--vocab", str(vocab)])
    payload = json.loads(capsys.readouterr().out)
    assert payload[0]["status"] == "Tracking"


def test_missing_input_file_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["segment", "-f", str(tmp_path / "missing.txt")])
    assert "missing.txt" in str(excinfo.value)


def test_explicit_missing_config_exits(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["segment", "--tokens", str(_write_tokens(tmp_path)), "--config", str(tmp_path / "nope.toml")])
    assert "Config file not found" in str(excinfo.value)


def test_mark_and_stats(tmp_path, capsys) -> None:
    vocab = tmp_path / "words.json"

    assert cli.main(["mark", "猫", "tracking", "--vocab", str(vocab)]) == 0
    assert capsys.readouterr().out.strip() == "猫: Tracking"

    assert cli.main(["stats", "--vocab", str(vocab)]) == 0
    out = capsys.readouterr().out
    assert "Tracking" in out
    assert "Never_Forget" in out

    assert cli.main(["mark", "猫", "tracking", "--delete", "--vocab", str(vocab)]) == 0
    assert cli.main(["mark", "猫", "tracking", "--delete", "--vocab", str(vocab)]) == 1
    assert json.loads(vocab.read_text(encoding="utf-8")) == {}


def test_mark_delete_needs_no_status(tmp_path, capsys) -> None:
    vocab = tmp_path / "words.json"
    cli.main(["mark", "猫", "tracking", "--vocab", str(vocab)])
    capsys.readouterr()

    assert cli.main(["mark", "猫", "--delete", "--vocab", str(vocab)]) == 0
    assert capsys.readouterr().out.strip() == "Forgot 猫"
    assert json.loads(vocab.read_text(encoding="utf-8")) == {}


def test_mark_without_status_is_rejected(tmp_path) -> None:
    vocab = tmp_path / "words.json"
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["mark", "猫", "--vocab", str(vocab)])
    assert "status is required" in str(excinfo.value)
    assert not vocab.exists()


def test_mark_rejects_unknown_status(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["mark", "猫", "learning", "--vocab", str(tmp_path / "words.json")])
    assert "Unknown word status" in str(excinfo.value)


def test_tools_status_reports_dictionary(monkeypatch, capsys) -> None:
    calls: dict[str, object] = {}

    def _fake_describe(tagset, override=None):
        calls["tagset"] = tagset
        return DictionaryStatus(
            tagset=tagset,
            available=False,
            path=None,
            source=None,
            detail="Install unidic or unidic_lite or set WAKACHI_MECAB_DICDIR.",
        )

    monkeypatch.setattr(cli, "describe_dictionary", _fake_describe)

    exit_code = cli.main(["tools", "status", "--tagset", "unidic"])

    assert exit_code == 1
    assert calls["tagset"] == "unidic"
    assert "unidic: MISSING" in capsys.readouterr().out


def test_tools_requires_subcommand() -> None:
    with pytest.raises(SystemExit):
        cli.main(["tools"])


def test_web_uses_utf8_access_log(monkeypatch, tmp_path, capsys) -> None:
    calls: dict[str, object] = {}

    def _fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(cli.uvicorn, "run", _fake_run)

    assert cli.main(["web", "--port", "9999", "--vocab", str(tmp_path / "words.json")]) == 0

    assert calls["port"] == 9999
    assert calls["host"] == "127.0.0.1"
    formatter = calls["log_config"]["formatters"]["access"]["()"]
    assert formatter == "wakachi.logging_utils.Utf8AccessFormatter"
    assert calls["app"].state.marker.path == tmp_path / "words.json"
    assert "http://127.0.0.1:9999/" in capsys.readouterr().out


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["-v"])
    assert excinfo.value.code == 0
    assert capsys.readouterr().out.startswith("wakachi ")
