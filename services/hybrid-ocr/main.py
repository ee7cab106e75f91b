"""FastAPI hybrid OCR service: document OCR, classification and field extraction.

Routes an uploaded document through a cascade of OCR engines, classifies
the Indonesian document type and extracts structured fields with an LLM.
Every pipeline outcome is HTTP 200; only a missing image_url is a 400.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from config import settings
from models import DocumentType, ExtractionRequest, ExtractionResponse, KKExtractRequest, PdfOcrRequest
from pdf_ocr import PdfOcrError
from pipeline import Services, assemble, build_services

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}

OCR_ROUTES = ("/api/v1/ocr", "/hybrid-ocr-processor")
KK_ROUTE = "/api/v1/kk-extract"
PDF_OCR_ROUTE = "/api/v1/pdf-ocr"

IMAGE_URL_REQUIRED = {"error": "image_url is required"}

_services: Services | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the OCR/LLM clients once and close them on shutdown."""
    global _services

    _services = build_services(settings)
    logger.info("Hybrid OCR service started: %s", _services.health())

    yield

    _services.close()
    _services = None


app = FastAPI(title="Hybrid OCR Processor", version="1.0.0", lifespan=lifespan)


# CORSMiddleware only answers preflights; every OPTIONS request here must end in a bare 204.
@app.middleware("http")
async def cors(request: Request, call_next):
    """Permissive CORS on every response; any OPTIONS request ends here with 204."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=CORS_HEADERS)

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "invalid value")
    return f"Invalid request body: {location + ': ' if location else ''}{detail}"


def _is_json_error(exc: RequestValidationError) -> bool:
    return any(error.get("type") == "json_invalid" for error in exc.errors())


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    """Answer malformed bodies in each route's own error shape instead of a 422."""
    path = request.url.path
    message = _validation_message(exc)
    logger.warning("Rejected request to %s: %s", path, message)

    if path in OCR_ROUTES:
        body = exc.body
        image_url = body.get("image_url") if isinstance(body, dict) else None
        if not _is_json_error(exc) and (not isinstance(image_url, str) or not image_url.strip()):
            return JSONResponse(status_code=400, content=IMAGE_URL_REQUIRED)

        failure = ExtractionResponse(
            success=False,
            ocr_engine="error",
            jenis_dokumen=DocumentType.UNKNOWN.value,
            error=message,
        )
        return JSONResponse(content=failure.model_dump())

    if path == KK_ROUTE:
        return JSONResponse(content={"success": False, "error": message, "data": None})

    if path == PDF_OCR_ROUTE:
        return JSONResponse(status_code=500, content={"success": False, "error": message})

    return await request_validation_exception_handler(request, exc)


def get_services() -> Services:
    global _services

    if _services is None:
        _services = build_services(settings)
    return _services


@app.post(OCR_ROUTES[0], response_model=ExtractionResponse, response_model_exclude_none=True)
@app.post(OCR_ROUTES[1], response_model=ExtractionResponse, response_model_exclude_none=True)
def process_document(req: ExtractionRequest, services: Services = Depends(get_services)):
    """OCR a document, classify it and extract its fields."""
    if not req.image_url or not req.image_url.strip():
        return JSONResponse(status_code=400, content=IMAGE_URL_REQUIRED)

    outcome = services.pipeline.run(req.image_url.strip(), req.file_type, req.document_type_hint)
    return assemble(outcome)


@app.post(KK_ROUTE)
def kk_extract(req: KKExtractRequest, services: Services = Depends(get_services)):
    """Full-table KK extraction from OCR text (or from an image when no text is given)."""
    return services.kk_extractor.run(req.ocr_text, req.image_url, req.file_type)


@app.post(PDF_OCR_ROUTE)
def pdf_ocr(req: PdfOcrRequest, services: Services = Depends(get_services)):
    """Text-layer OCR of a PDF via OCR.space."""
    if not req.pdf_url:
        return JSONResponse(status_code=500, content={"success": False, "error": "pdf_url is required"})

    try:
        text, pages = services.pdf_ocr.extract(req.pdf_url)
    except PdfOcrError as e:
        logger.error("PDF OCR failed: %s", e)
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    return {"success": True, "text": text, "pages": pages}


@app.get("/health")
async def health(services: Services = Depends(get_services)):
    """Return service status and which collaborators are configured."""
    return {
        "status": "healthy",
        "collaborators": services.health(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
