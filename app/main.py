from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from assistant.chat import ChatClient, GenerateRequest, generate_reply
from assistant.core.memory import MemoryStore
from assistant.deepseek import DeepSeekClient
from assistant.errors import AssistantError
from config.settings import Settings, get_settings


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
logger = logging.getLogger("maxmovies")

SERVICE_NAME = "MaxMovies AI Assistant"
SERVICE_VERSION = "1.0.0"

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}
ALLOWED_METHODS = ["POST", "GET", "OPTIONS"]
EXAMPLE_PAYLOAD = {"prompt": "Recommend movies", "userId": "optional_user_id"}


@lru_cache(maxsize=1)
def get_memory_store() -> MemoryStore:
    return MemoryStore(get_settings().memory_dir)


def get_chat_client(settings: Settings = Depends(get_settings)) -> ChatClient:
    return DeepSeekClient.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_memory_store().init()
    yield


app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)


# The CORS headers go on every response, not only on requests that send an Origin.
@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def _request_settings(request: Request) -> Settings:
    # exception handlers sit outside dependency injection; honour overrides by hand
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return provider()


def _error_response(
    status_code: int, message: str, settings: Settings, details: Optional[str] = None, **extra: Any
) -> JSONResponse:
    body: Dict[str, Any] = {"error": message, **extra}
    if details and settings.is_development:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    settings = _request_settings(request)
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return _error_response(400, "Invalid JSON in request body", settings, details=str(errors))
    # a missing or non-object body has no field location past "body"
    prompt_error = any(tuple(err["loc"][1:2]) in {(), ("prompt",)} for err in errors)
    message = "Missing or empty prompt parameter." if prompt_error else "Invalid request body."
    return _error_response(400, message, settings, details=str(errors), example=EXAMPLE_PAYLOAD)


@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message, _request_settings(request), details=exc.details)


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code != 405 or request.url.path != "/api/generate":
        return await http_exception_handler(request, exc)
    return JSONResponse(
        status_code=405,
        content={
            "error": f"Method {request.method} not allowed. Use POST or GET.",
            "allowed": ALLOWED_METHODS,
        },
        headers={"Allow": ", ".join(ALLOWED_METHODS)},
    )


@app.options("/api/generate")
async def generate_preflight() -> Response:
    return Response(status_code=200)


@app.get("/api/generate")
async def generate_status() -> Dict[str, Any]:
    return {
        "status": "online",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": {
            "generate": {
                "method": "POST",
                "description": "Chat with the AI",
                "body": {
                    "prompt": "string (required)",
                    "userId": "string (optional, default: 'default')",
                    "project": "string (optional)",
                },
            }
        },
    }


@app.post("/api/generate")
async def generate(
    req: GenerateRequest,
    settings: Settings = Depends(get_settings),
    store: MemoryStore = Depends(get_memory_store),
    client: ChatClient = Depends(get_chat_client),
) -> Dict[str, Any]:
    logger.info(
        "Incoming chat: user_id=%s project=%s prompt_len=%s key_set=%s",
        req.user_id,
        req.project,
        len(req.prompt),
        bool(settings.deepseek_api_key),
    )

    try:
        result = await generate_reply(req, store=store, client=client, settings=settings)
    except AssistantError:
        raise
    except Exception as e:
        logger.exception("Chat processing failed: %s", e)
        raise AssistantError(details=str(e)) from e

    logger.info("Model responded: %s chars", len(result.reply))
    return result.to_response()


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
