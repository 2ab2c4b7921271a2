from __future__ import annotations

import base64
import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import Settings
from ..errors import NoProvidersAvailableError, OcrError
from ..schemas import ErrorBody, ErrorResponse, ImageInput, OcrHealth, ProviderState
from ..service import ReceiptService

log = logging.getLogger(__name__)


class Health(BaseModel):
	status: str = "ok"


def http_error(
	code: str, message: str, status: int, details: dict | None = None
) -> JSONResponse:
	return JSONResponse(
		status_code=status,
		content=ErrorResponse(
			error=ErrorBody(code=code, message=message, details=details or {})
		).model_dump(),
	)


def build_router(settings: Settings, svc: ReceiptService) -> APIRouter:
	router = APIRouter(prefix="/v1")

	@router.get("/health", response_model=Health)
	async def health() -> Health:
		return Health()

	@router.get("/health/ocr", response_model=OcrHealth)
	async def health_ocr() -> JSONResponse:
		report = svc.ocr_health()
		return JSONResponse(
			status_code=503 if report.status == "down" else 200,
			content=report.model_dump(),
		)

	@router.get("/providers", response_model=list[ProviderState])
	async def providers() -> list[ProviderState]:
		return svc.provider_states()

	@router.post("/receipts/parse")
	async def parse(files: list[UploadFile] = File(...)) -> JSONResponse:
		if not files:
			return http_error("VALIDATION_ERROR", "at least one file is required", 400)

		limit = settings.max_upload_mb * 1024 * 1024
		images: list[ImageInput] = []
		for f in files:
			if f.content_type not in settings.allowed_mime_types:
				return http_error(
					"UNSUPPORTED_MEDIA_TYPE",
					"only JPEG, PNG, WebP or GIF are supported",
					415,
					{"filename": f.filename},
				)
			blob = await f.read()
			if not blob:
				return http_error(
					"VALIDATION_ERROR", "empty file", 400, {"filename": f.filename}
				)
			if len(blob) > limit:
				return http_error(
					"PAYLOAD_TOO_LARGE",
					f"file exceeds {settings.max_upload_mb} MB",
					413,
					{"filename": f.filename},
				)
			images.append(
				ImageInput(
					base64=base64.b64encode(blob).decode("ascii"),
					mime_type=f.content_type,
				)
			)

		try:
			result = await svc.parse_with_system_keys(images, images[0].mime_type)
		except NoProvidersAvailableError as e:
			log.error("ocr not configured: %s", e)
			return http_error("NO_PROVIDERS", str(e), 503, {"order": e.order})
		except OcrError as e:
			status = 502 if e.retryable else 422
			log.warning("ocr failed: %s", e, extra={"error_kind": e.kind.value})
			return http_error(
				e.kind.value, e.message, status, {"retryable": e.retryable}
			)
		except Exception as e:
			log.exception("parse failed")
			return http_error(
				"INTERNAL", "failed to parse receipt", 500, {"reason": str(e)}
			)

		return JSONResponse(result.model_dump(by_alias=True))

	return router
