from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import Headers

from config.settings import Settings, get_settings
from relay.errors import MISSING_INPUT_REPLY, SERVER_ERROR_REPLY, RelayError, UpstreamError
from relay.relay import exchange
from relay.schemas import ChatReply, ChatRequest
from relay.upstream.gemini import GeminiClient


logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s - %(message)s")
# httpx logs every request URL at INFO, and the Gemini key rides in the query string
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger("chat_relay")

TOO_LARGE_REPLY = "⚠️ Request too large"

router = APIRouter()


class BodySizeLimitMiddleware:
    """Answer 413 for request bodies over ``Settings.max_body_bytes``.

    A declared Content-Length is checked up front. Bodies without one
    (chunked) are buffered until they end or cross the limit, then replayed
    to the app.
    """

    def __init__(self, app) -> None:
        self.app = app

    async def __call__(self, scope, receive, send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        limit = get_settings().max_body_bytes
        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit():
            if int(length) > limit:
                await self._reject(scope, receive, send, length)
            else:
                await self.app(scope, receive, send)
            return

        messages = []
        size = 0
        while True:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            size += len(message.get("body", b""))
            if size > limit:
                await self._reject(scope, receive, send, f">{limit}")
                return
            if not message.get("more_body", False):
                break

        async def replay():
            if messages:
                return messages.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope, receive, send, size) -> None:
        logger.warning("Rejected %s %s: body of %s bytes", scope["method"], scope["path"], size)
        response = JSONResponse(status_code=413, content={"reply": TOO_LARGE_REPLY})
        await response(scope, receive, send)


async def invalid_body(request: Request, exc: RequestValidationError):
    logger.info("Invalid chat request body: %s", exc.errors())
    return JSONResponse(status_code=400, content={"reply": MISSING_INPUT_REPLY})


def get_gemini_client() -> GeminiClient:
    return GeminiClient(get_settings())


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "✅ AI Chat Assistant Backend is running"


@router.get("/api", response_class=PlainTextResponse)
def health() -> str:
    return "✅ Gemini backend running"


@router.post("/api/chat", response_model=ChatReply)
def chat(req: ChatRequest, client: GeminiClient = Depends(get_gemini_client)):
    try:
        return exchange(req.message, req.image, client=client)
    except UpstreamError as e:
        logger.exception("Upstream call failed: %s", e)
        return JSONResponse(status_code=e.status_code, content={"reply": e.reply})
    except RelayError as e:
        logger.info("Rejected chat request: %s", e)
        return JSONResponse(status_code=e.status_code, content={"reply": e.reply})
    except Exception as e:
        logger.exception("Chat processing failed: %s", e)
        return JSONResponse(status_code=500, content={"reply": SERVER_ERROR_REPLY})


def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="AI Chat Assistant Relay", version="1.0.0")
    app.add_middleware(BodySizeLimitMiddleware)
    # Open to any origin unless CORS_ORIGINS narrows it; added last so 413s carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, invalid_body)
    app.include_router(router)
    return app


settings = get_settings()
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
