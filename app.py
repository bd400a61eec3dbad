"""
FastAPI application - REST API for Test Pilot.

Endpoints:
  POST /api/generate-test          - Start generating and running a test from a prompt
  GET  /api/test-result/{test_id}  - Get a job's progress or final result
  GET  /api/test-history           - Most recent jobs, newest first
  GET  /api/test-files             - Feature files available on disk
  GET  /health                     - Health check

Job history is kept in process memory only; restarting the server clears it.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

import config
from features.jobs import JobStore
from models.errors import JobNotFoundError, ValidationError
from utils.llm import get_backend
from workflows.pipeline import GenerationPipeline

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tests may install their own pipeline before startup
    if getattr(app.state, "pipeline", None) is None:
        app.state.pipeline = GenerationPipeline(
            backend=get_backend(config.LLM_BACKEND),
            store=JobStore(),
        )
    log.info("Test Pilot ready (history is in-memory only and is lost on restart)")
    yield


app = FastAPI(
    title="Test Pilot",
    description="Generates end-to-end UI tests from plain-language prompts and runs them",
    version="1.0.0",
    lifespan=lifespan,
)


class GenerateTestRequest(BaseModel):
    prompt: str | None = None


class GenerateTestResponse(BaseModel):
    testId: str
    status: str
    message: str


def _pipeline(request: Request) -> GenerationPipeline:
    return request.app.state.pipeline


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def _bad_request(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(JobNotFoundError)
async def _not_found(request: Request, exc: JobNotFoundError):
    return JSONResponse(status_code=404, content={"error": "Test not found"})


# ── Health ────────────────────────────────────────────────────────────

@app.get("/health")
def health(request: Request):
    pipeline = _pipeline(request)
    return {
        "status": "ok",
        "service": "test-pilot",
        "backend": pipeline.backend.name,
        "jobs": len(pipeline.store),
        "history": "in-memory",
    }


# ── Test generation ───────────────────────────────────────────────────

@app.post("/api/generate-test", response_model=GenerateTestResponse)
async def generate_test(request: Request, req: GenerateTestRequest | None = None):
    """Start a job; poll /api/test-result/{testId} for progress."""
    test_id = _pipeline(request).submit(req.prompt if req else None)
    return GenerateTestResponse(
        testId=test_id,
        status="processing",
        message="Test generation started",
    )


@app.get("/api/test-result/{test_id}")
async def get_test_result(test_id: str, request: Request) -> dict[str, Any]:
    return _pipeline(request).store.get(test_id).to_dict()


@app.get("/api/test-history")
async def get_test_history(request: Request) -> list[dict[str, Any]]:
    jobs = _pipeline(request).store.list(limit=config.HISTORY_LIMIT)
    return [job.to_dict() for job in jobs]


@app.get("/api/test-files")
async def get_test_files():
    loop = asyncio.get_running_loop()
    try:
        names = await loop.run_in_executor(None, _list_feature_files)
    except OSError as e:
        log.error("Could not list feature files: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return names


def _list_feature_files() -> list[str]:
    return sorted(p.name for p in config.FEATURES_DIR.iterdir() if p.name.endswith(".feature"))


# Browser client, mounted last so it never shadows the API routes
if config.STATIC_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(config.STATIC_DIR), html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.HOST, port=config.PORT)
