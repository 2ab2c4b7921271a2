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


class AnthropicProvider:
	name = "anthropic"
	billing_provider = "anthropic"

	def __init__(self, settings: Settings) -> None:
		self.settings = settings

	def model_id(self) -> str | None:
		return self.settings.anthropic_model

	def is_available(self) -> bool:
		return sdk_installed("anthropic")

	async def parse_receipt(
		self,
		images: Sequence[ImageInput],
		api_key: str,
		mime_type: ImageMimeType,
	) -> ParsedReceipt:
		import anthropic

		content: list[dict[str, Any]] = [
			{
				"type": "image",
				"source": {
					"type": "base64",
					"media_type": img.mime_type or mime_type,
					"data": img.base64,
				},
			}
			for img in images
		]
		content.append({"type": "text", "text": build_prompt(len(images))})

		async with anthropic.AsyncAnthropic(api_key=api_key) as client:
			with tracer.start_as_current_span("provider.anthropic.parse") as span:
				span.set_attribute("llm.provider", self.name)
				span.set_attribute("llm.model", self.model_id() or "")
				span.set_attribute("request.images", len(images))

				resp = await client.messages.create(
					model=self.settings.anthropic_model,
					max_tokens=self.settings.max_output_tokens,
					messages=[{"role": "user", "content": content}],
				)

				if not resp.content:
					raise OcrError(
						"Claude returned empty response; receipt may be unreadable "
						"or blocked by safety filters",
						OcrErrorKind.PARSE_FAILED,
					)

				text_parts = [b.text for b in resp.content if b.type == "text"]
				if not text_parts:
					raise OcrError(
						"Claude returned empty response with no text content",
						OcrErrorKind.PARSE_FAILED,
					)

				raw = "\n".join(text_parts)
				span.set_attribute("response.size_bytes", len(raw.encode("utf-8")))

		return parse_llm_response(raw, "Claude")
