from __future__ import annotations

import importlib.util
import logging
from typing import Protocol, Sequence

from ..schemas import ImageInput, ImageMimeType, ParsedReceipt

log = logging.getLogger(__name__)


class OcrProvider(Protocol):
	name: str
	billing_provider: str  # opaque tag, charged by the caller

	def model_id(self) -> str | None: ...
	def is_available(self) -> bool: ...
	async def parse_receipt(
		self,
		images: Sequence[ImageInput],
		api_key: str,
		mime_type: ImageMimeType,
	) -> ParsedReceipt: ...


def sdk_installed(module: str) -> bool:
	# lightweight capability check; never imports the sdk itself
	try:
		return importlib.util.find_spec(module) is not None
	except (ImportError, ValueError) as e:
		log.debug("sdk probe failed for %s: %s", module, e)
		return False
