from __future__ import annotations

import logging
from typing import Any, Sequence

from opentelemetry import trace

from ..config import Settings
from ..errors import OcrError, OcrErrorKind
from ..normalize import parse_llm_response
from ..schemas import ImageInput, ImageMimeType, ParsedReceipt
from .base import sdk_installed
from .prompt import build_prompt

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class OpenAIProvider:
	"""Receipt OCR through the OpenAI chat completions vision input."""

	name = "openai"
	billing_provider = "openai"

	def __init__(self, settings: Settings) -> None:
		self.settings = settings

	def model_id(self) -> str | None:
		return self.settings.openai_model

	def is_available(self) -> bool:
		return sdk_installed("openai")

	async def parse_receipt(
		self,
		images: Sequence[ImageInput],
		api_key: str,
		mime_type: ImageMimeType,
	) -> ParsedReceipt:
		import openai

		content: list[dict[str, Any]] = [
			{"type": "text", "text": build_prompt(len(images))}
		]
		for img in images:
			media_type = img.mime_type or mime_type
			content.append(
				{
					"type": "image_url",
					"image_url": {"url": f"data:{media_type};base64,{img.base64}"},
				}
			)

		async with openai.AsyncOpenAI(api_key=api_key) as client:
			with tracer.start_as_current_span("provider.openai.parse") as span:
				span.set_attribute("llm.provider", self.name)
				span.set_attribute("llm.model", self.model_id() or "")
				span.set_attribute("request.images", len(images))

				resp = await client.chat.completions.create(
					model=self.settings.openai_model,
					max_tokens=self.settings.max_output_tokens,
					messages=[{"role": "user", "content": content}],
				)

				raw = resp.choices[0].message.content if resp.choices else None
				if not raw:
					raise OcrError("OpenAI returned empty response", OcrErrorKind.PARSE_FAILED)
				span.set_attribute("response.size_bytes", len(raw.encode("utf-8")))

		return parse_llm_response(raw, "OpenAI")
