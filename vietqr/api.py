"""FastAPI application exposing VietQR generation, parsing and validation."""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response

from .config import settings
from .encoder import generate
from .errors import DecodingError, GenerationError
from .logging_conf import configure_logging
from .middleware import RequestLoggingMiddleware
from .monitoring import (
    metrics_payload,
    record_decode_failure,
    record_generated,
    record_service_error,
    record_validation,
)
from .parser import ParseOptions, parse, parse_with_options
from .renderer import render_image, render_qr_payload
from .schemas import (
    FieldSchema,
    GenerateQRRequest,
    GenerateQRResponse,
    ImageRequest,
    ParseResponse,
    PayloadRecordSchema,
    PayloadRequest,
    QRImageOptions,
    ValidateRequest,
    ValidateResponse,
    ValidationResultSchema,
)
from .validation.record import ValidationOptions, validate

app = FastAPI(title="vietqr", version="0.1.0")
app.add_middleware(RequestLoggingMiddleware)

logger = logging.getLogger("vietqr.api")

_MEDIA_TYPES = {"png": "image/png", "svg": "image/svg+xml"}


def _warn_insecure_defaults() -> None:
    if settings.api_key == "dev-secret-key":
        logger.warning(
            "api key is using the default value",
            extra={"config_key": "api_key"},
        )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    _warn_insecure_defaults()


async def require_api_key(x_api_key: str = Header(...)) -> None:
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    return route.path if route else request.url.path


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    route_path = _route_path(request)
    logger.warning(
        "configuration rejected",
        extra={"code": exc.code, "path": route_path, "error_count": len(exc.errors)},
    )
    record_service_error(exc.code, route_path)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "code": exc.code,
            "message": exc.message,
            "errors": [issue.to_dict() for issue in exc.errors],
        },
    )


@app.exception_handler(DecodingError)
async def decoding_error_handler(request: Request, exc: DecodingError) -> JSONResponse:
    route_path = _route_path(request)
    logger.warning(
        "decoding error",
        extra={"code": exc.code, "path": route_path, "position": exc.position},
    )
    record_service_error(exc.code, route_path)
    record_decode_failure(exc.kind.value)
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message, "position": exc.position},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled exception",
        extra={"path": _route_path(request), "method": request.method},
    )
    return JSONResponse(status_code=500, content={"code": "ERR_INTERNAL", "message": "Internal server error"})


@app.get("/health", tags=["system"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metrics", tags=["system"])
async def metrics() -> Response:
    payload, content_type = metrics_payload()
    return Response(content=payload, media_type=content_type)


@app.post("/v1/qr", response_model=GenerateQRResponse, tags=["qr"], dependencies=[Depends(require_api_key)])
async def generate_qr(payload: GenerateQRRequest) -> GenerateQRResponse:
    generated = generate(payload.to_config())
    record_generated(generated.variant)

    qr_png_base64 = None
    if payload.include_image:
        qr_png_base64 = render_qr_payload(generated.payload, payload.image)["png_base64"]

    return GenerateQRResponse(
        payload=generated.payload,
        crc=generated.crc,
        variant=generated.variant,
        fields=[FieldSchema.from_field(item) for item in generated.fields],
        qr_png_base64=qr_png_base64,
    )


@app.post("/v1/qr/parse", response_model=ParseResponse, tags=["qr"], dependencies=[Depends(require_api_key)])
async def parse_qr(payload: PayloadRequest) -> ParseResponse:
    options = ParseOptions(
        strict_mode=payload.strict_mode,
        extract_partial_on_error=payload.extract_partial_on_error,
    )
    record = parse_with_options(payload.payload, options)
    return ParseResponse(record=PayloadRecordSchema.from_record(record))


@app.post("/v1/qr/validate", response_model=ValidateResponse, tags=["qr"], dependencies=[Depends(require_api_key)])
async def validate_qr(payload: ValidateRequest) -> ValidateResponse:
    options = ParseOptions(
        strict_mode=payload.strict_mode,
        extract_partial_on_error=payload.extract_partial_on_error,
    )
    record = parse_with_options(payload.payload, options)
    result = validate(
        record,
        payload.payload,
        ValidationOptions(
            skip_crc_check=payload.skip_crc_check,
            treat_warnings_as_errors=payload.treat_warnings_as_errors,
        ),
    )
    record_validation(result.valid, result.corrupted)
    return ValidateResponse(
        record=PayloadRecordSchema.from_record(record),
        validation=ValidationResultSchema(**result.to_dict()),
    )


@app.post("/v1/qr/image", tags=["qr"], dependencies=[Depends(require_api_key)])
async def render_qr(payload: ImageRequest) -> Response:
    parse(payload.payload)
    options = payload.options or QRImageOptions.from_settings()
    return Response(content=render_image(payload.payload, options), media_type=_MEDIA_TYPES[options.format])
