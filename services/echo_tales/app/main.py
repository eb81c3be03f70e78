from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.common.logging import get_logger, setup_logging
from src.common.metrics import JOB_DURATION, setup_metrics
from src.common.telemetry import setup_otel

from . import deps, schemas
from .api import ApiError, router

settings = deps.get_settings()
setup_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(title="echo_tales")
setup_metrics(app, "echo_tales")
setup_otel(app, "echo_tales", settings.otel_exporter_otlp_endpoint)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    body = schemas.ErrorResponse(message=exc.message, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code, content=body.model_dump(exclude_none=True)
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    body = schemas.ErrorResponse(
        message="Invalid request body", errors=jsonable_encoder(exc.errors())
    )
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


@app.on_event("startup")
def on_startup() -> None:
    deps.init_db()
    deps.ensure_audio_dir()
    current = deps.get_settings()
    if not current.openai_api_key:
        logger.warning("openai_key_missing", routes=["/api/stories"])
    if not current.eleven_labs_api_key:
        logger.warning(
            "eleven_labs_key_missing",
            routes=["/api/tts", "/api/voices", "/api/stories"],
        )
    JOB_DURATION.labels("echo_tales", "startup").observe(0)


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/readyz")
def readyz() -> dict[str, str]:
    return {"status": "ready"}


app.include_router(router)
