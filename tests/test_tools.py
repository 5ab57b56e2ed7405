from __future__ import annotations

import os
import types

import wakachi.tools as tools


def _make_dicdir(path):
    path.mkdir(parents=True)
    (path / "dicrc").write_text("", encoding="utf-8")
    return path


def test_env_override_wins(monkeypatch, tmp_path) -> None:
    env_dir = _make_dicdir(tmp_path / "env")
    config_dir = _make_dicdir(tmp_path / "config")
    monkeypatch.setenv("WAKACHI_MECAB_DICDIR", str(env_dir))

    status = tools.describe_dictionary("ipadic", config_dir)
    assert status.available is True
    assert status.path == env_dir
    assert status.source == "WAKACHI_MECAB_DICDIR"


def test_config_dicdir_is_used_when_valid(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("WAKACHI_MECAB_DICDIR", raising=False)
    config_dir = _make_dicdir(tmp_path / "config")
    assert tools.get_dicdir("unidic", config_dir) == config_dir


def test_dictionary_package_is_discovered(monkeypatch, tmp_path) -> None:
    monkeypatch.delenv("WAKACHI_MECAB_DICDIR", raising=False)
    package_dir = _make_dicdir(tmp_path / "unidic_lite" / "dicdir")
    modules = {"unidic_lite": types.SimpleNamespace(DICDIR=str(package_dir))}

    def _fake_import(name):
        if name in modules:
            return modules[name]
        raise ImportError(name)

    monkeypatch.setattr(tools.importlib, "import_module", _fake_import)

    status = tools.describe_dictionary("unidic", tmp_path / "not-a-dicdir")
    assert status.path == package_dir
    assert status.source == "unidic_lite"


def test_missing_dictionary_is_reported(monkeypatch) -> None:
    monkeypatch.delenv("WAKACHI_MECAB_DICDIR", raising=False)

    def _fake_import(name):
        raise ImportError(name)

    monkeypatch.setattr(tools.importlib, "import_module", _fake_import)

    status = tools.describe_dictionary("ipadic")
    assert status.available is False
    assert status.path is None
    assert "ipadic" in status.detail


def test_mecab_args_quotes_paths(tmp_path) -> None:
    dicdir = tmp_path / "with space"
    args = tools.mecab_args(dicdir)
    assert args == f"-r {os.devnull} -d '{dicdir}'"
