from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence, Union

from .config import Settings
from .orchestrator import OcrOrchestrator
from .registry import ProviderRegistry, probe_available
from .schemas import (
	ImageInput,
	ImageMimeType,
	OcrHealth,
	OcrProviderHealth,
	OcrResult,
	ProviderState,
)

log = logging.getLogger(__name__)

ImageArg = Union[str, ImageInput]


def as_image_inputs(
	images: Union[str, Sequence[ImageArg]], mime_type: ImageMimeType
) -> list[ImageInput]:
	"""Accept one base64 string, many, or ready ImageInput values."""
	if isinstance(images, str):
		return [ImageInput(base64=images, mime_type=mime_type)]
	return [
		img if isinstance(img, ImageInput) else ImageInput(base64=img, mime_type=mime_type)
		for img in images
	]


class ReceiptService:
	def __init__(self, settings: Settings, registry: ProviderRegistry) -> None:
		self.settings = settings
		self.registry = registry
		self.orchestrator = OcrOrchestrator(registry, settings)

	async def parse_receipt_with_fallback(
		self,
		images: Union[str, Sequence[ImageArg]],
		anthropic_key: Optional[str],
		openai_key: Optional[str],
		mime_type: ImageMimeType = "image/jpeg",
		gemini_key: Optional[str] = None,
	) -> OcrResult:
		keys = {
			"anthropic": anthropic_key,
			"openai": openai_key,
			"gemini": gemini_key,
		}

		def key_for_provider(name: str) -> Optional[str]:
			return keys.get(name) or None

		return await self.orchestrator.run_ocr(
			as_image_inputs(images, mime_type), mime_type, key_for_provider
		)

	async def parse_with_system_keys(
		self, images: Sequence[ImageInput], mime_type: ImageMimeType
	) -> OcrResult:
		return await self.orchestrator.run_ocr(
			images, mime_type, self.settings.system_key
		)

	def provider_states(self) -> list[ProviderState]:
		return [
			ProviderState(
				name=p.name,
				billing_provider=p.billing_provider,
				available=probe_available(p),
				model=p.model_id(),
			)
			for p in self.registry.all()
		]

	def ocr_health(self) -> OcrHealth:
		"""Local readiness of the OCR path; never calls a backend."""
		order = self.registry.resolve_order()

		providers: list[OcrProviderHealth] = []
		for name in order:
			p = self.registry.get(name)
			registered = p is not None
			providers.append(
				OcrProviderHealth(
					name=name,
					registered=registered,
					available=registered and probe_available(p),
					has_system_key=self.settings.system_key(name) is not None,
				)
			)

		configured = sum(1 for p in providers if p.registered and p.available)
		with_keys = sum(1 for p in providers if p.has_system_key)

		# missing system keys only degrade: users can still bring their own
		if configured == 0:
			status = "down"
		elif with_keys == 0:
			status = "degraded"
		else:
			status = "ok"

		return OcrHealth(
			status=status,
			provider_order=order,
			registered_providers=self.registry.names(),
			providers=providers,
			providers_configured=configured,
			providers_with_keys=with_keys,
			timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
		)
