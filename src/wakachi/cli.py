from __future__ import annotations

import argparse
import json
import os
import sys
from importlib import metadata
from pathlib import Path
from typing import Sequence

import tomllib
import uvicorn
from rich.console import Console
from rich.table import Table

from .config import ConfigError, SegmenterConfig, load_config
from .logging_utils import build_uvicorn_log_config, set_debug_logging
from .nlp import NLPBackendUnavailableError
from .page import segment_html
from .segmenter import TextSegmenter
from .tokens import Segment, deserialize_tokens, serialize_segments
from .tools import describe_dictionary
from .vocab import VocabularyStoreError, WordMarker, WordStatus
from .web import WebConfig, create_app


def _read_local_version() -> str | None:
    # src/wakachi/cli.py -> repository root
    pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        with pyproject_path.open("rb") as fh:
            project = tomllib.load(fh).get("project", {})
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return project.get("version")


try:
    __version__ = metadata.version("wakachi")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"wakachi {__version__}",
    )


def _add_common_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="Path to a TOML config file (default: $WAKACHI_CONFIG or ~/.config/wakachi/config.toml).",
    )
    parser.add_argument(
        "--vocab",
        help="Path to the marked-words JSON file (overrides the config).",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wakachi",
        description=(
            "Split Japanese text into learner-friendly words. "
            "Other commands: `wakachi mark`, `wakachi stats`, `wakachi web`, `wakachi tools`."
        ),
    )
    _add_version_flag(ap)
    ap.add_argument(
        "text",
        nargs="?",
        help="Text to segment. Reads --file or stdin when omitted.",
    )
    ap.add_argument("-f", "--file", help="Read the text from this file.")
    ap.add_argument(
        "--html",
        action="store_true",
        help="Treat the input as HTML and segment each visible text node.",
    )
    ap.add_argument(
        "--tokens",
        help="Merge a JSON list of pre-tokenized morphemes instead of running MeCab.",
    )
    ap.add_argument("--json", action="store_true", help="Emit JSON instead of a table.")
    ap.add_argument(
        "--no-merge",
        action="store_true",
        help="Show raw morphemes without learner-friendly merging.",
    )
    ap.add_argument(
        "--debug",
        action="store_true",
        help="Log every merge decision to stderr.",
    )
    _add_common_flags(ap)
    return ap


def build_mark_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wakachi mark",
        description="Record the learning status of a word (keyed by its base form).",
    )
    _add_version_flag(ap)
    ap.add_argument("spelling", help="Base form of the word.")
    ap.add_argument(
        "status",
        nargs="?",
        help="One of: " + ", ".join(status.value for status in WordStatus),
    )
    ap.add_argument("--sentence", help="Sentence the word was met in.")
    ap.add_argument("--delete", action="store_true", help="Forget the word instead.")
    _add_common_flags(ap)
    return ap


def build_stats_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wakachi stats",
        description="Count marked words per learning status.",
    )
    _add_version_flag(ap)
    _add_common_flags(ap)
    return ap


def build_web_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="wakachi web",
        description="Serve segmentation and word status over HTTP.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host interface for the web server (default: 127.0.0.1).",
    )
    ap.add_argument(
        "--port",
        type=int,
        default=2047,
        help="Port for the web server (default: 2047).",
    )
    ap.add_argument("--debug", action="store_true", help="Log every merge decision to stderr.")
    _add_common_flags(ap)
    return ap


def build_tools_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="wakachi tools", description="Dictionary helpers.")
    subparsers = ap.add_subparsers(dest="tool_cmd")
    status = subparsers.add_parser(
        "status",
        help="Show which MeCab dictionary would be used.",
    )
    status.add_argument(
        "--tagset",
        choices=["ipadic", "unidic"],
        help="Dictionary family to check (default: from config).",
    )
    status.add_argument("--config", help="Path to a TOML config file.")
    return ap


def _load_config(args: argparse.Namespace) -> SegmenterConfig:
    config_path = Path(args.config).expanduser() if getattr(args, "config", None) else None
    try:
        return load_config(config_path)
    except ConfigError as exc:
        raise SystemExit(str(exc)) from exc


def _open_marker(args: argparse.Namespace, config: SegmenterConfig) -> WordMarker:
    vocab_path = Path(args.vocab).expanduser() if getattr(args, "vocab", None) else config.vocab_path
    try:
        return WordMarker(vocab_path).load()
    except VocabularyStoreError as exc:
        raise SystemExit(str(exc)) from exc


def _read_input(args: argparse.Namespace) -> str | None:
    if args.text is not None:
        return args.text
    if args.file:
        path = Path(args.file).expanduser()
        if not path.is_file():
            raise SystemExit(f"Input file not found: {path}")
        return path.read_text(encoding="utf-8")
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return None


def _segments_table(segments: Sequence[Segment], marker: WordMarker, title: str | None = None) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Surface")
    table.add_column("Base")
    table.add_column("Span")
    table.add_column("POS")
    table.add_column("Status")
    for idx, item in enumerate(segments):
        start, end = item.span()
        status = marker.status_of(item.base_form).value if item.is_word_like else ""
        table.add_row(
            str(idx),
            item.surface_form,
            item.base_form,
            f"{start}-{end}",
            item.pos if not item.pos_sub1 or item.pos_sub1 == "*" else f"{item.pos}/{item.pos_sub1}",
            status,
            style=None if item.is_word_like else "dim",
        )
    return table


def _run_segment(args: argparse.Namespace) -> int:
    set_debug_logging(bool(args.debug))
    config = _load_config(args)
    marker = _open_marker(args, config)
    console = Console()
    segmenter = TextSegmenter(config=config)
    merge = False if args.no_merge else None

    if args.tokens:
        tokens_path = Path(args.tokens).expanduser()
        try:
            data = json.loads(tokens_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SystemExit(f"Failed to read tokens from {tokens_path}: {exc}") from exc
        if not isinstance(data, list):
            raise SystemExit(f"{tokens_path} must contain a JSON list of tokens.")
        segments = segmenter.merge(deserialize_tokens(data), merge=merge)
        return _emit_segments(args, console, segments, marker)

    text = _read_input(args)
    if text is None:
        build_parser().print_help()
        return 0

    try:
        if args.html:
            nodes = segment_html(text, segmenter, merge=merge)
        else:
            segments = segmenter.segment(text, merge=merge)
    except NLPBackendUnavailableError as exc:
        raise SystemExit(str(exc)) from exc

    if not args.html:
        return _emit_segments(args, console, segments, marker)

    if args.json:
        payload = [
            {
                "node": node.index,
                "parent": node.parent,
                "text": node.text,
                "segments": serialize_segments(
                    node.segments, marker.statuses(item.base_form for item in node.segments)
                ),
            }
            for node in nodes
        ]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    for node in nodes:
        title = f"<{node.parent}> #{node.index}" if node.parent else f"#{node.index}"
        console.print(_segments_table(node.segments, marker, title=title))
    return 0


def _emit_segments(
    args: argparse.Namespace,
    console: Console,
    segments: Sequence[Segment],
    marker: WordMarker,
) -> int:
    if args.json:
        statuses = marker.statuses(item.base_form for item in segments)
        print(json.dumps(serialize_segments(segments, statuses), ensure_ascii=False, indent=2))
        return 0
    console.print(_segments_table(segments, marker))
    return 0


def _run_mark(args: argparse.Namespace) -> int:
    config = _load_config(args)
    marker = _open_marker(args, config)
    try:
        if args.delete:
            if not marker.delete(args.spelling):
                print(f"{args.spelling} is not marked.")
                return 1
            print(f"Forgot {args.spelling}")
            return 0
        if args.status is None:
            raise SystemExit("A status is required unless --delete is given.")
        try:
            status = WordStatus.parse(args.status)
        except ValueError as exc:
            raise SystemExit(str(exc)) from exc
        word = marker.set(args.spelling, status, args.sentence)
    except VocabularyStoreError as exc:
        raise SystemExit(str(exc)) from exc
    print(f"{word.spelling}: {word.status.value}")
    return 0


def _run_stats(args: argparse.Namespace) -> int:
    config = _load_config(args)
    marker = _open_marker(args, config)
    counts = marker.counting()
    table = Table(title=str(marker.path))
    table.add_column("Status")
    table.add_column("Words", justify="right")
    for status in WordStatus:
        table.add_row(status.value, str(counts.get(status.value, 0)))
    Console().print(table)
    return 0


def _run_tools(args: argparse.Namespace) -> int:
    if not args.tool_cmd:
        raise SystemExit("A tools subcommand is required. Use --help for options.")

    if args.tool_cmd == "status":
        config = _load_config(args)
        tagset = args.tagset or config.tagset
        status = describe_dictionary(tagset, config.dicdir)
        if status.available:
            print(f"{status.tagset}: OK ({status.path}, via {status.source})")
        else:
            print(f"{status.tagset}: MISSING - {status.detail}")
        env_dir = os.environ.get("WAKACHI_MECAB_DICDIR")
        if env_dir:
            print(f"WAKACHI_MECAB_DICDIR is set to: {env_dir}")
        return 0 if status.available else 1

    raise SystemExit(f"Unknown tools subcommand: {args.tool_cmd}")


def _run_web(args: argparse.Namespace) -> None:
    set_debug_logging(bool(args.debug))
    config = _load_config(args)
    vocab_path = Path(args.vocab).expanduser() if args.vocab else config.vocab_path
    try:
        app = create_app(WebConfig(vocab_path=vocab_path, segmenter=config))
    except VocabularyStoreError as exc:
        raise SystemExit(str(exc)) from exc
    print(f"Serving wakachi on http://{args.host}:{args.port}/")
    print(f"Marked words: {vocab_path}")
    print("Press Ctrl+C to stop.\n")
    uvicorn.run(
        app,
        host=args.host,
        port=args.port,
        log_level="info",
        log_config=build_uvicorn_log_config(),
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "mark":
        return _run_mark(build_mark_parser().parse_args(argv[1:]))
    if argv and argv[0] == "stats":
        return _run_stats(build_stats_parser().parse_args(argv[1:]))
    if argv and argv[0] == "web":
        _run_web(build_web_parser().parse_args(argv[1:]))
        return 0
    if argv and argv[0] == "tools":
        return _run_tools(build_tools_parser().parse_args(argv[1:]))
    if argv and argv[0] == "segment":
        argv = argv[1:]

    args = build_parser().parse_args(argv)
    return _run_segment(args)


if __name__ == "__main__":
    raise SystemExit(main())
