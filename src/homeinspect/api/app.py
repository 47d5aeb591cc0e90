"""FastAPI application - HTTP surface of the inspection service"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.staticfiles import StaticFiles
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from homeinspect.api.schemas import ChatBody
from homeinspect.api.streaming import relay_fragments
from homeinspect.application.analysis_service import AnalysisService
from homeinspect.application.chat_service import ChatService
from homeinspect.application.config_service import ConfigService
from homeinspect.domain.config.app import AppSettings
from homeinspect.domain.error_translator import translate_provider_error
from homeinspect.domain.errors import ConfigValidationError, ProviderError, UploadError
from homeinspect.domain.models.requests import ChatRequest, normalize_history, normalize_image
from homeinspect.infrastructure.config.config_store import ConfigStore
from homeinspect.infrastructure.llm.base import LLMProvider
from homeinspect.infrastructure.llm.factory import LLMProviderFactory
from homeinspect.infrastructure.uploads import UploadStaging

logger = logging.getLogger(__name__)

TEXT_STREAM = "text/plain; charset=utf-8"


def parse_categories(raw: Optional[str]) -> List[str]:
    """Parse the ``categories`` form field (JSON array of labels)

    Raises:
        ConfigValidationError: If the field is not a JSON array
    """
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError as e:
        raise ConfigValidationError("categories must be a JSON array of strings") from e
    if not isinstance(value, list):
        raise ConfigValidationError("categories must be a JSON array of strings")
    return ["" if item is None else str(item) for item in value]


def too_large_response() -> JSONResponse:
    return JSONResponse(status_code=413, content={"success": False, "error": "Request body is too large"})


class BodyTooLargeError(HTTPException):
    """Request body grew past ``server.max_body_bytes`` while being read"""

    def __init__(self, limit: int):
        super().__init__(status_code=413, detail=f"Request body exceeds {limit} bytes")


class BodySizeLimitMiddleware:
    """Enforce ``server.max_body_bytes`` on declared and on received length.

    A declared Content-Length over the limit is answered with 413 before the
    app runs. Chunked bodies are counted as they arrive; the read that crosses
    the limit raises BodyTooLargeError.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length and length.isdigit() and int(length) > self.max_bytes:
            logger.warning(f"Rejecting {scope['path']}: body of {length} bytes exceeds limit")
            await too_large_response()(scope, receive, send)
            return

        received = 0

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(f"Rejecting {scope['path']}: body exceeds {self.max_bytes} bytes")
                    raise BodyTooLargeError(self.max_bytes)
            return message

        await self.app(scope, counting_receive, send)


def validation_error_response(error: ConfigValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": str(error),
            "errorType": "validation_error",
            "details": {"errors": error.errors},
        },
    )


def create_app(settings: AppSettings, store: ConfigStore, llm_provider: LLMProvider) -> FastAPI:
    """Build the application around an explicitly owned store and provider"""
    app = FastAPI(title="Home Inspection Assistant")
    app.state.settings = settings
    app.state.store = store
    app.state.llm_provider = llm_provider

    llm_provider.reconfigure(store.get())
    store.subscribe(llm_provider.reconfigure)

    analysis_service = AnalysisService(llm_provider)
    chat_service = ChatService(llm_provider, max_context_chars=settings.limits.context_max_chars)
    config_service = ConfigService(store, llm_provider, test_timeout=settings.limits.config_test_timeout)
    upload_dir = Path(settings.storage.upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.server.max_body_bytes)

    @app.exception_handler(BodyTooLargeError)
    async def body_too_large_handler(request: Request, exc: BodyTooLargeError):
        return too_large_response()

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [f"{'.'.join(str(x) for x in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return validation_error_response(ConfigValidationError("Invalid request: " + "; ".join(errors), errors))

    @app.post("/api/analyze")
    async def analyze(
        request: Request,
        photo: Optional[List[UploadFile]] = File(None),
        categories: Optional[str] = Form(None),
    ):
        try:
            labels = parse_categories(categories)
            with UploadStaging(upload_dir) as staging:
                for upload in photo or []:
                    staging.add(await upload.read(), upload.filename, upload.content_type)
                analysis = staging.build_request(labels)
                fragments = await run_in_threadpool(analysis_service.analyze, analysis, store.get())
        except ConfigValidationError as e:
            return PlainTextResponse(f"Analysis failed: {e}", status_code=400)
        except UploadError as e:
            logger.error(f"Analysis error: {e}")
            return PlainTextResponse(f"Analysis failed: {e}", status_code=500)
        except ProviderError as e:
            logger.error(f"Analysis error: {e!r}")
            translated = translate_provider_error(e)
            return PlainTextResponse(f"Analysis failed: {translated.message}", status_code=500)

        def on_error(error: ProviderError) -> str:
            return f"\n\nAnalysis failed: {translate_provider_error(error).message}"

        return StreamingResponse(relay_fragments(request, fragments, on_error), media_type=TEXT_STREAM)

    @app.post("/api/chat")
    async def chat(request: Request, body: ChatBody):
        try:
            chat_request = ChatRequest(
                message=body.message,
                system_prompt=body.systemPrompt,
                context=body.context,
                history=normalize_history(body.conversationHistory),
                images=[normalize_image(image) for image in body.images or []],
                prompt_override=body.promptOverride,
            )
            config = store.get()
            if chat_request.has_images:
                text = await run_in_threadpool(chat_service.reply_with_images, chat_request, config)
                return {"success": True, "response": text}
            fragments = await run_in_threadpool(chat_service.stream_reply, chat_request, config)
        except ConfigValidationError as e:
            return validation_error_response(e)
        except ProviderError as e:
            logger.error(f"Chat error: {e!r}")
            return JSONResponse(status_code=500, content=translate_provider_error(e).to_response())

        def on_error(error: ProviderError) -> str:
            return f"\n\nChat failed: {translate_provider_error(error).message}"

        return StreamingResponse(relay_fragments(request, fragments, on_error), media_type=TEXT_STREAM)

    @app.get("/api/llm-config")
    async def read_config():
        return {"success": True, "config": config_service.read()}

    @app.put("/api/llm-config")
    async def update_config(request: Request):
        try:
            changes = await request.json()
        except ValueError:
            return validation_error_response(ConfigValidationError("Request body must be valid JSON"))
        try:
            config = await run_in_threadpool(config_service.update, changes)
        except ConfigValidationError as e:
            logger.warning(f"Rejected configuration update: {e}")
            return validation_error_response(e)
        return {
            "success": True,
            "message": "Configuration updated. The LLM has been reinitialized with the new settings.",
            "config": config.to_wire(),
        }

    @app.post("/api/llm-config/test")
    async def test_config(request: Request):
        try:
            changes = await request.json()
        except ValueError:
            return validation_error_response(ConfigValidationError("Request body must be valid JSON"))
        try:
            result = await run_in_threadpool(config_service.test, changes)
        except ConfigValidationError as e:
            return validation_error_response(e)

        if result.success:
            return {
                "success": True,
                "message": "Configuration is working, including image analysis.",
                "response": result.response,
                "config": result.tested_config(),
            }
        content = result.error.to_response()
        content.update(
            {
                "isVisionError": result.error.is_vision_error,
                "isTimeout": result.error.is_timeout,
                "config": result.tested_config(),
            }
        )
        return content

    @app.get("/health")
    async def health():
        config = store.get()
        return {
            "status": "OK",
            "llm": {
                "model": config.model_name,
                "temperature": config.temperature,
                "topP": config.top_p,
            },
        }

    static_dir = settings.server.static_dir
    if static_dir:
        if Path(static_dir).is_dir():
            app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
        else:
            logger.warning(f"Static directory not found: {static_dir}")

    return app


def create_app_from_settings(settings: AppSettings) -> FastAPI:
    """Build store and provider from settings, then the app"""
    store = ConfigStore(Path(settings.storage.config_path))
    llm_provider = LLMProviderFactory.from_settings(settings.provider)
    return create_app(settings, store, llm_provider)
