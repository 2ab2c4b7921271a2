from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict

from .config import configured_provider_order

if TYPE_CHECKING:
	from .providers.base import OcrProvider

log = logging.getLogger(__name__)


class ProviderRegistry:
	def __init__(self) -> None:
		self._providers: Dict[str, OcrProvider] = {}
		# set by register_builtin_providers so a second call is a no-op
		self.builtins_registered = False

	def register(self, provider: OcrProvider) -> None:
		if provider.name in self._providers:
			log.debug("replacing ocr provider %r", provider.name)
		self._providers[provider.name] = provider

	def get(self, name: str) -> OcrProvider | None:
		return self._providers.get(name)

	def names(self) -> list[str]:
		return list(self._providers)

	def all(self) -> list[OcrProvider]:
		return list(self._providers.values())

	def resolve_order(self) -> list[str]:
		return configured_provider_order()

	def reset(self) -> None:
		self._providers.clear()
		self.builtins_registered = False


def probe_available(provider: OcrProvider) -> bool:
	"""is_available() that reports a broken probe as unavailable."""
	try:
		return bool(provider.is_available())
	except Exception as e:
		log.warning(
			"availability probe raised; treating provider as unavailable",
			extra={"provider": provider.name, "error": str(e)},
		)
		return False
