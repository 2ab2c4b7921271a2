from __future__ import annotations

import logging
import threading

from ..config import Settings, load_settings
from ..registry import ProviderRegistry
from .anthropic import AnthropicProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider

log = logging.getLogger(__name__)

__all__ = [
	"AnthropicProvider",
	"GeminiProvider",
	"OpenAIProvider",
	"default_registry",
	"register_builtin_providers",
]

_lock = threading.Lock()
_default: ProviderRegistry | None = None


def register_builtin_providers(
	registry: ProviderRegistry, settings: Settings | None = None
) -> bool:
	"""Wire the built-in adapters into ``registry``.

	Returns False when the registry already had them, so hot reloads and
	duplicate startup hooks cannot register twice.
	"""
	with _lock:
		if registry.builtins_registered:
			return False
		settings = settings or load_settings()
		for provider in (
			AnthropicProvider(settings),
			OpenAIProvider(settings),
			GeminiProvider(settings),
		):
			registry.register(provider)
		registry.builtins_registered = True

	log.info("ocr providers registered", extra={"providers": registry.names()})
	return True


def default_registry() -> ProviderRegistry:
	"""Process-wide registry with the built-in adapters, for production wiring."""
	global _default
	with _lock:
		if _default is None:
			_default = ProviderRegistry()
	register_builtin_providers(_default)
	return _default
