import logging
import time
import uuid
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from thinkcheck.core.config import settings
from thinkcheck.core.exceptions import ThinkCheckException
from thinkcheck.core.llm import CompletionClient
from thinkcheck.core.logging_config import log_request, request_id_var, setup_logging
from thinkcheck.core.prompt_manager import get_prompt_manager
from thinkcheck.routers import evaluation, notes, quiz, roadmap, system
from thinkcheck.schemas import ErrorResponse
from thinkcheck.services import AnswerEvaluator, NotesService, QuizService, RoadmapService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging(settings.ENVIRONMENT, settings.LOG_LEVEL, settings.LOG_DIR)
    logger.info(f"🚀 Starting {settings.APP_NAME} v{settings.VERSION}...")

    http_client = httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS)
    client = CompletionClient(settings=settings, http_client=http_client)
    prompts = get_prompt_manager()

    app.state.completion_client = client
    app.state.quiz_service = QuizService(client, prompts, settings)
    app.state.answer_evaluator = AnswerEvaluator(client, prompts, settings)
    app.state.notes_service = NotesService(client, prompts)
    app.state.roadmap_service = RoadmapService(client, prompts, settings)

    if not client.is_configured:
        logger.warning("⚠️ LLM_API_KEY is not set; generation routes will answer 500")

    yield

    # Shutdown
    logger.info(f"🛑 Shutting down {settings.APP_NAME}...")
    await http_client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    token = request_id_var.set(request_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        log_request(request.method, request.url.path, response.status_code, started)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = request_id
    return response


# ============================================================================
# Error handlers
# ============================================================================

def _error_response(status_code: int, error: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=error, details=None if details is None else str(details))
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.exception_handler(ThinkCheckException)
async def thinkcheck_exception_handler(request: Request, exc: ThinkCheckException):
    if exc.http_status >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return _error_response(exc.http_status, str(exc), exc.details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Frontend expects 400 rather than FastAPI's 422
    details = "; ".join(
        f"{'.'.join(str(loc) for loc in err['loc'] if loc != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error_response(400, "Invalid request data", details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


app.include_router(system.router)
app.include_router(quiz.router, prefix=settings.API_PREFIX)
app.include_router(evaluation.router, prefix=settings.API_PREFIX)
app.include_router(notes.router, prefix=settings.API_PREFIX)
app.include_router(roadmap.router, prefix=settings.API_PREFIX)
