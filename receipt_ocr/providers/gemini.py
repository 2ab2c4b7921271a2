from __future__ import annotations

import base64
import binascii
import logging
from typing import Sequence

from opentelemetry import trace

from ..config import Settings
from ..errors import OcrError, OcrErrorKind
from ..normalize import parse_llm_response
from ..schemas import ImageInput, ImageMimeType, ParsedReceipt
from .base import sdk_installed
from .prompt import build_prompt

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _decode(img: ImageInput) -> bytes:
	try:
		return base64.b64decode(img.base64, validate=True)
	except (binascii.Error, ValueError) as exc:
		raise OcrError("image is not valid base64", OcrErrorKind.BAD_INPUT) from exc


class GeminiProvider:
	name = "gemini"
	billing_provider = "gemini"

	def __init__(self, settings: Settings) -> None:
		self.settings = settings

	def model_id(self) -> str | None:
		return self.settings.gemini_model

	def is_available(self) -> bool:
		return sdk_installed("google.genai")

	async def parse_receipt(
		self,
		images: Sequence[ImageInput],
		api_key: str,
		mime_type: ImageMimeType,
	) -> ParsedReceipt:
		from google import genai
		from google.genai import types

		parts = [
			types.Part.from_bytes(data=_decode(img), mime_type=img.mime_type or mime_type)
			for img in images
		]
		# must use keyword-only for from_text
		parts.append(types.Part.from_text(text=build_prompt(len(images))))

		cfg = types.GenerateContentConfig(
			response_mime_type="application/json",
			max_output_tokens=self.settings.max_output_tokens,
		)

		client = genai.Client(api_key=api_key)

		try:
			with tracer.start_as_current_span("provider.gemini.parse") as span:
				span.set_attribute("llm.provider", self.name)
				span.set_attribute("llm.model", self.model_id() or "")
				span.set_attribute("request.images", len(images))

				resp = await client.aio.models.generate_content(
					model=self.settings.gemini_model,
					contents=parts,
					config=cfg,
				)

				raw = resp.text
				if not raw:
					raise OcrError("Gemini returned empty response", OcrErrorKind.PARSE_FAILED)
				span.set_attribute("response.size_bytes", len(raw.encode("utf-8")))
		finally:
			await client.aio.aclose()

		return parse_llm_response(raw, "Gemini")
