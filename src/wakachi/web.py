from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from .config import SegmenterConfig, default_vocab_path
from .nlp import NLPBackendUnavailableError
from .page import sentence_around
from .segmenter import TextSegmenter
from .tokens import serialize_segments
from .vocab import VocabularyStoreError, WordMarker, WordStatus

__all__ = ["WebConfig", "create_app"]

MAX_TEXT_LENGTH = 20000


@dataclass
class WebConfig:
    vocab_path: Path = field(default_factory=default_vocab_path)
    segmenter: SegmenterConfig = field(default_factory=SegmenterConfig)


def create_app(config: WebConfig, segmenter: TextSegmenter | None = None) -> FastAPI:
    app = FastAPI(title="wakachi")
    app.state.config = config
    text_segmenter = segmenter or TextSegmenter(config=config.segmenter)
    marker = WordMarker(config.vocab_path).load()
    app.state.marker = marker
    marker_lock = threading.Lock()

    def _words_payload() -> dict[str, object]:
        return {spelling: word.to_dict() for spelling, word in marker.get_all().items()}

    @app.get("/api/health")
    def api_health() -> JSONResponse:
        return JSONResponse({"ok": True})

    @app.post("/api/segment")
    def api_segment(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        text = payload.get("text")
        if not isinstance(text, str):
            raise HTTPException(status_code=400, detail="text must be a string.")
        if len(text) > MAX_TEXT_LENGTH:
            raise HTTPException(status_code=413, detail="text is too long.")
        merge = payload.get("merge")
        if merge is not None and not isinstance(merge, bool):
            raise HTTPException(status_code=400, detail="merge must be a boolean or null.")
        try:
            segments = text_segmenter.segment(text, merge=merge)
        except NLPBackendUnavailableError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        with marker_lock:
            statuses = marker.statuses(item.base_form for item in segments)
        return JSONResponse(serialize_segments(segments, statuses))

    @app.get("/api/words")
    def api_words() -> JSONResponse:
        with marker_lock:
            return JSONResponse(_words_payload())

    @app.get("/api/words/stats")
    def api_word_stats() -> JSONResponse:
        with marker_lock:
            return JSONResponse(marker.counting())

    @app.post("/api/words")
    def api_mark_word(payload: dict[str, object] = Body(...)) -> JSONResponse:
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid payload.")
        spelling = payload.get("spelling")
        if not isinstance(spelling, str) or not spelling.strip():
            raise HTTPException(status_code=400, detail="spelling is required.")
        status_value = payload.get("status")
        if not isinstance(status_value, str):
            raise HTTPException(status_code=400, detail="status is required.")
        try:
            status = WordStatus.parse(status_value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        sentence = payload.get("sentence")
        context = payload.get("context")
        if sentence is None and isinstance(context, dict):
            sentence = _sentence_from_context(context)
        if sentence is not None and not isinstance(sentence, str):
            raise HTTPException(status_code=400, detail="sentence must be a string or null.")
        with marker_lock:
            try:
                word = marker.set(spelling.strip(), status, sentence)
            except VocabularyStoreError as exc:
                raise HTTPException(status_code=500, detail=str(exc)) from exc
        return JSONResponse({"word": word.to_dict(), "sentence": sentence})

    @app.delete("/api/words/{spelling}")
    def api_delete_word(spelling: str) -> JSONResponse:
        with marker_lock:
            try:
                removed = marker.delete(spelling)
            except VocabularyStoreError as exc:
                raise HTTPException(status_code=500, detail=str(exc)) from exc
        if not removed:
            raise HTTPException(status_code=404, detail="Word not found.")
        return JSONResponse({"deleted": True, "spelling": spelling})

    return app


def _sentence_from_context(context: dict[str, object]) -> str | None:
    text = context.get("text")
    start = context.get("start")
    end = context.get("end")
    if not isinstance(text, str) or not isinstance(start, int) or not isinstance(end, int):
        raise HTTPException(status_code=400, detail="context needs text, start and end.")
    return sentence_around(text, start, end)
