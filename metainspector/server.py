"""
HTTP server for MetaInspector.
FastAPI app that serves the dashboard and the JSON analysis endpoint.
"""

from datetime import datetime
from typing import Any

from fastapi import FastAPI, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, ValidationError, field_validator

from .config import load_config
from .dashboard import render_dashboard
from .healthcheck import run_all_checks
from .inspector import FetchError, InvalidURLError, analyze_url
from .logging_setup import get_logger
from .validators import is_valid_url, normalize_url

logger = get_logger("server")

app = FastAPI(title="SEO Meta Inspector", version="1.0.0")


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze."""

    url: str

    @field_validator("url", mode="before")
    @classmethod
    def validate_url(cls, value: object) -> str:
        text = str(value or "").strip()
        if not is_valid_url(text):
            raise ValueError("Invalid url")
        return text


def _error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


@app.get("/", response_class=HTMLResponse)
async def index():
    """Dashboard in its initial state."""
    return HTMLResponse(content=render_dashboard(), status_code=200)


@app.post("/analyze", response_class=HTMLResponse)
def analyze_form(url: str = Form("")):
    """Handle the dashboard form and render results or an error."""
    target = normalize_url(url) or ""
    if not is_valid_url(target):
        return HTMLResponse(
            content=render_dashboard(url=url, error="Please enter a valid URL."),
            status_code=400,
        )

    try:
        result = analyze_url(target, load_config())
    except FetchError as e:
        return HTMLResponse(content=render_dashboard(url=target, error=str(e)), status_code=400)
    except Exception as e:
        logger.error(f"Error analyzing website {target}: {e}", exc_info=True)
        return HTMLResponse(
            content=render_dashboard(url=target, error="Failed to analyze website"),
            status_code=500,
        )

    return HTMLResponse(content=render_dashboard(result=result), status_code=200)


@app.post("/api/analyze")
async def analyze_api(request: Request):
    """Analyze the page at {"url": ...} and return the result as JSON."""
    try:
        payload = await request.json()
    except ValueError:
        return _error_response(
            400,
            "Invalid input data",
            errors=[{"loc": ["body"], "msg": "JSON decode error", "type": "json_invalid"}],
        )

    try:
        body = AnalyzeRequest.model_validate(payload if payload is not None else {})
    except ValidationError as e:
        return _error_response(
            400,
            "Invalid input data",
            errors=[
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ],
        )

    try:
        result = await run_in_threadpool(analyze_url, body.url, load_config())
    except InvalidURLError as e:
        return _error_response(400, "Invalid input data", errors=[{"loc": ["url"], "msg": str(e)}])
    except FetchError as e:
        return _error_response(400, str(e))
    except Exception as e:
        logger.error(f"Error analyzing website {body.url}: {e}", exc_info=True)
        return _error_response(500, "Failed to analyze website", error=str(e))

    return JSONResponse(status_code=200, content=result.to_dict())


@app.get("/health")
async def health():
    """Health check endpoint."""
    all_healthy, results = run_all_checks()
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={
            "status": "ok" if all_healthy else "unhealthy",
            "timestamp": datetime.utcnow().isoformat(),
            "checks": [r.to_dict() for r in results],
        },
    )
