# ABOUTME: FastAPI app: POST /rewrite, POST /rewrite/stream (SSE), POST /extract/{outcomes,unstuck,actions}.
# ABOUTME: 400 on bad request shape, 502 on generation/extraction failure, 500 on anything else. GET /presets, GET /health.

import json
import logging
import time
from contextlib import closing

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel

from core.config import CORS_ORIGINS, MODEL_NAME
from core.errors import ExtractionFailed, GenerationError, RequestError
from core.schemas import Outcome, SmartAction
from rewrite_engine.presets import all_preset_ids, preset_info
from rewrite_engine.pipeline import (
    extract_insight_action,
    extract_outcomes,
    extract_smart_actions,
    rewrite,
    rewrite_stream,
)

extract_router = APIRouter(prefix="/extract", tags=["extract"])


class RewriteRequest(BaseModel):
    text: str
    preset_id: str
    language: str | None = None
    context: list[str] | None = None


class ExtractRequest(BaseModel):
    text: str
    language: str | None = None


class RewriteResponse(BaseModel):
    text: str
    was_improved: bool
    quality_score: int
    cached: bool
    status: str
    duration_ms: int


class OutcomesResponse(BaseModel):
    outcomes: list[Outcome]
    count: int
    attempts: int
    quality_score: int
    status: str
    duration_ms: int


class InsightActionResponse(BaseModel):
    insight: str
    action: str
    attempts: int
    quality_score: int
    status: str
    duration_ms: int


class SmartActionsResponse(BaseModel):
    actions: list[SmartAction]
    count: int
    original_text: str
    attempts: int
    quality_score: int
    status: str
    duration_ms: int


def _duration_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


@extract_router.post("/outcomes", response_model=OutcomesResponse)
def post_extract_outcomes(req: ExtractRequest):
    """Extract typed outcomes from messy input."""
    start = time.perf_counter()
    try:
        result = extract_outcomes(req.text, req.language)
    except RequestError as e:
        return _error(400, str(e))
    except (GenerationError, ExtractionFailed):
        logging.exception("extract_outcomes failed")
        return _error(502, "Could not extract outcomes. Please try again.")
    except Exception:
        logging.exception("extract_outcomes: unexpected error")
        return _error(500, "An unexpected error occurred while extracting outcomes.")
    return OutcomesResponse(
        outcomes=result.outcomes,
        count=len(result.outcomes),
        attempts=result.attempts,
        quality_score=result.quality_score,
        status=result.status.value,
        duration_ms=_duration_ms(start),
    )


@extract_router.post("/unstuck", response_model=InsightActionResponse)
def post_extract_unstuck(req: ExtractRequest):
    """Return one insight and one small next action."""
    start = time.perf_counter()
    try:
        result = extract_insight_action(req.text, req.language)
    except RequestError as e:
        return _error(400, str(e))
    except (GenerationError, ExtractionFailed):
        logging.exception("extract_insight_action failed")
        return _error(502, "Could not generate an insight. Please try again.")
    except Exception:
        logging.exception("extract_insight_action: unexpected error")
        return _error(500, "An unexpected error occurred while generating an insight.")
    return InsightActionResponse(
        insight=result.insight,
        action=result.action,
        attempts=result.attempts,
        quality_score=result.quality_score,
        status=result.status.value,
        duration_ms=_duration_ms(start),
    )


@extract_router.post("/actions", response_model=SmartActionsResponse)
def post_extract_actions(req: ExtractRequest):
    """Classify input into calendar, email, todo, note and message actions."""
    start = time.perf_counter()
    try:
        result = extract_smart_actions(req.text, req.language)
    except RequestError as e:
        return _error(400, str(e))
    except (GenerationError, ExtractionFailed):
        logging.exception("extract_smart_actions failed")
        return _error(502, "Could not extract actions. Please try again.")
    except Exception:
        logging.exception("extract_smart_actions: unexpected error")
        return _error(500, "An unexpected error occurred while extracting actions.")
    return SmartActionsResponse(
        actions=result.actions,
        count=len(result.actions),
        original_text=req.text,
        attempts=result.attempts,
        quality_score=result.quality_score,
        status=result.status.value,
        duration_ms=_duration_ms(start),
    )


app = FastAPI(title="Rewrite Engine API")
app.include_router(extract_router)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def get_health():
    return {"status": "ok", "model": MODEL_NAME, "presets": len(all_preset_ids())}


@app.get("/presets")
def get_presets():
    """List every preset with its category and sampling parameters."""
    return {"presets": [preset_info(p) for p in all_preset_ids()]}


@app.post("/rewrite", response_model=RewriteResponse)
def post_rewrite(req: RewriteRequest):
    """Rewrite text with a preset. Unknown preset ids fall back to the default preset."""
    start = time.perf_counter()
    try:
        result = rewrite(req.text, req.preset_id, req.language, req.context)
    except RequestError as e:
        return _error(400, str(e))
    except (GenerationError, ExtractionFailed):
        logging.exception("rewrite failed")
        return _error(502, "Text generation failed. Please try again.")
    except Exception:
        logging.exception("rewrite: unexpected error")
        return _error(500, "An unexpected error occurred while rewriting.")
    return RewriteResponse(
        text=result.text,
        was_improved=result.was_improved,
        quality_score=result.quality_score,
        cached=result.cached,
        status=result.status.value,
        duration_ms=_duration_ms(start),
    )


def _sse(events):
    """Format engine events as server-sent events; an unexpected failure becomes a final error event."""
    try:
        with closing(events):
            for event in events:
                yield f"data: {json.dumps(event, ensure_ascii=False)}\n\n"
    except Exception:
        logging.exception("rewrite_stream: unexpected error")
        error = {"type": "error", "message": "An unexpected error occurred while streaming."}
        yield f"data: {json.dumps(error)}\n\n"


@app.post("/rewrite/stream")
def post_rewrite_stream(req: RewriteRequest):
    """Stream the rewrite as SSE chunk events, then one done or error event."""
    try:
        events = rewrite_stream(req.text, req.preset_id, req.language, req.context)
    except RequestError as e:
        return _error(400, str(e))
    return StreamingResponse(
        _sse(events),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
