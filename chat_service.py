"""
Portfolio chat service: one serverless-friendly endpoint that answers
questions about a single portfolio via an upstream chat-completion API.

Pipeline per request:
  CORS / method check -> token bucket -> input guard -> prompt assembly
  -> sequential model fallback -> flavoring

Every response, errors included, carries Access-Control-Allow-Origin.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from config import AppConfig, load_config
from errors import ChatError, RateLimitExceeded, UpstreamModelError
from fallback import FallbackInvoker
from flavor import Flavorer
from guard import validate_message
from logger import LOGGER_NAME, setup_logging
from prompts import build_prompt, load_persona_text, normalize_history
from rate_limiter import TokenBucketLimiter, client_identity
from utils import dump_config, load_env_files

log = logging.getLogger(LOGGER_NAME)

CHAT_PATH = "/api/chat"
ALLOWED_METHODS = "POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"


def cors_origin(origin: Optional[str], allowed_origin: str) -> str:
    """Echo the caller's origin when it starts with the allowed one, else the default."""
    if origin and origin.startswith(allowed_origin):
        return origin
    return allowed_origin


def _request_id(request: Request) -> str:
    return (
        (request.headers.get("x-request-id") or "").strip()
        or (request.headers.get("x-correlation-id") or "").strip()
        or uuid.uuid4().hex
    )


async def _read_body(request: Request) -> Dict[str, Any]:
    """JSON object body, or an empty dict for missing/invalid/non-object bodies."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    return body


def create_app(
    config: AppConfig,
    limiter: Optional[TokenBucketLimiter] = None,
    invoker: Optional[FallbackInvoker] = None,
    flavorer: Optional[Flavorer] = None,
    persona_text: Optional[str] = None,
) -> FastAPI:
    """Build the application around explicitly constructed pipeline parts."""
    limiter = limiter if limiter is not None else TokenBucketLimiter.from_config(config)
    invoker = invoker if invoker is not None else FallbackInvoker.from_config(config)
    flavorer = flavorer if flavorer is not None else Flavorer.from_config(config)
    persona = persona_text if persona_text is not None else load_persona_text(config.persona_path)

    app = FastAPI(title="portfolio-chat", version="1.0.0")
    app.state.config = config
    app.state.limiter = limiter
    app.state.invoker = invoker
    app.state.flavorer = flavorer

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    @app.api_route(CHAT_PATH, methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
    async def chat(request: Request) -> Response:
        """Handle one chat turn."""
        headers = {
            "Access-Control-Allow-Origin": cors_origin(request.headers.get("origin"), config.allowed_origin),
        }

        if request.method == "OPTIONS":
            headers["Access-Control-Allow-Methods"] = ALLOWED_METHODS
            headers["Access-Control-Allow-Headers"] = ALLOWED_HEADERS
            return Response(status_code=200, headers=headers)

        if request.method != "POST":
            return JSONResponse({"error": "Use POST"}, status_code=405, headers=headers)

        identity = client_identity(request.headers, request.client.host if request.client else None)
        req_id = _request_id(request)
        log.info("Incoming chat req_id=%s from=%s", req_id, identity)

        try:
            if not limiter.allow(identity):
                log.warning("Rate limited req_id=%s from=%s", req_id, identity)
                raise RateLimitExceeded()

            body = await _read_body(request)
            message = validate_message(body.get("message"), config.max_message_chars)
            history = normalize_history(body.get("history"))

            prompt = build_prompt(
                persona,
                history,
                message,
                assistant_name=config.assistant_name,
                turns=config.history_turns,
            )
            raw_answer = await invoker.complete(prompt, req_id=req_id)
            answer = flavorer.flavor(raw_answer)

            return JSONResponse(
                {"answer": answer, "assistant": config.assistant_name},
                status_code=200,
                headers=headers,
            )
        except ChatError as e:
            if e.status_code >= 500:
                log.error("Chat failed req_id=%s status=%s detail=%r", req_id, e.status_code, e.detail)
            else:
                log.info("Chat rejected req_id=%s status=%s reason=%s", req_id, e.status_code, e.message)
            return JSONResponse(e.to_body(), status_code=e.status_code, headers=headers)
        except UpstreamModelError as e:
            log.error(
                "Upstream rejected req_id=%s model=%s status=%s detail=%r",
                req_id,
                e.model,
                e.status_code,
                e.text,
            )
            return JSONResponse(
                {"error": "Server error", "detail": e.text},
                status_code=500,
                headers=headers,
            )
        except Exception as e:
            log.exception("Unexpected failure req_id=%s", req_id)
            return JSONResponse(
                {"error": "Server error", "detail": str(e)},
                status_code=500,
                headers=headers,
            )

    return app


# Load environment
load_env_files()

# Load configuration
config = load_config()
config.validate(require_api_key=False)

# Initialize logging
log = setup_logging(config.log_path)
dump_config(config)
if not config.groq_api_key:
    log.warning("GROQ_API_KEY is not set; upstream calls will be rejected")

app = create_app(config)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.port, reload=False)
