from __future__ import annotations

import sys
from copy import copy, deepcopy
from typing import Any
from urllib.parse import unquote

from uvicorn.config import LOGGING_CONFIG
from uvicorn.logging import AccessFormatter as UvicornAccessFormatter

_DEBUG_LOG = False


def set_debug_logging(enabled: bool) -> None:
    global _DEBUG_LOG
    _DEBUG_LOG = enabled


def debug_enabled() -> bool:
    return _DEBUG_LOG


def debug_log(message: str) -> None:
    if _DEBUG_LOG:
        print(f"[wakachi debug] {message}", file=sys.stderr)


def _decode_path(value: str) -> str:
    try:
        return unquote(value, encoding="utf-8", errors="replace")
    except Exception:
        return value


class Utf8AccessFormatter(UvicornAccessFormatter):
    """Access log formatter that shows /api/words/食べる instead of percent escapes."""

    def formatMessage(self, record):  # type: ignore[override]
        try:
            client_addr, method, full_path, http_version, status_code = record.args
        except (TypeError, ValueError):
            return super().formatMessage(record)
        decoded_path = _decode_path(full_path) if isinstance(full_path, str) else full_path
        new_record = copy(record)
        new_record.args = (client_addr, method, decoded_path, http_version, status_code)
        return super().formatMessage(new_record)


def build_uvicorn_log_config() -> dict[str, Any]:
    config = deepcopy(LOGGING_CONFIG)
    formatter = config.get("formatters", {}).get("access")
    if isinstance(formatter, dict):
        formatter["()"] = "wakachi.logging_utils.Utf8AccessFormatter"
    return config
