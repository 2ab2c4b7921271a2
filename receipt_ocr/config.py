from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable

SERVICE_NAME = "receipt-ocr"

# env var holding the comma-separated try-order; read on every call
PROVIDER_ORDER_ENV = "OCR_PROVIDER_ORDER"
DEFAULT_PROVIDER_ORDER = ("anthropic", "openai", "gemini")


def _env(name: str, default: Any, cast: Callable[[str], Any]):
	raw = os.getenv(name)
	if raw is None or raw.strip() == "":
		return default
	try:
		return cast(raw)
	except Exception as e:
		raise ValueError(
			f"env var {name!r}={raw!r} not valid for {cast.__name__}"
		) from e


def _default_allowed_mime_types() -> frozenset[str]:
	return frozenset({"image/jpeg", "image/png", "image/webp", "image/gif"})


@dataclass(frozen=True)
class Settings:
	service: str = SERVICE_NAME
	log_level: str = "INFO"
	json_logs: bool = False
	otlp_endpoint: str | None = None

	# provider tuning
	anthropic_model: str = "claude-sonnet-4-5-20250929"
	openai_model: str = "gpt-4o"
	gemini_model: str = "gemini-2.5-flash"
	max_output_tokens: int = 4000
	# None leaves provider calls unbounded
	provider_timeout_secs: float | None = None

	# system keys, used by the REST surface and the OCR health report
	anthropic_api_key: str | None = field(default=None, repr=False)
	openai_api_key: str | None = field(default=None, repr=False)
	google_api_key: str | None = field(default=None, repr=False)

	# constraints
	max_upload_mb: int = 10
	allowed_mime_types: frozenset[str] = field(
		default_factory=_default_allowed_mime_types
	)

	def system_key(self, provider_name: str) -> str | None:
		keys = {
			"anthropic": self.anthropic_api_key,
			"openai": self.openai_api_key,
			"gemini": self.google_api_key,
		}
		return keys.get(provider_name) or None


def load_settings() -> Settings:
	otlp_endpoint = _env("OTLP_ENDPOINT", None, str)
	loki_url = _env("LOKI_URL", None, str)  # presence toggles json logs
	return Settings(
		log_level=_env("LOG_LEVEL", "INFO", str),
		json_logs=bool(otlp_endpoint or loki_url),
		otlp_endpoint=otlp_endpoint,
		anthropic_model=_env(
			"ANTHROPIC_MODEL", Settings.anthropic_model, str
		).strip(),
		openai_model=_env("OPENAI_MODEL", Settings.openai_model, str).strip(),
		gemini_model=_env("GEMINI_MODEL", Settings.gemini_model, str).strip(),
		max_output_tokens=_env("MAX_OUTPUT_TOKENS", Settings.max_output_tokens, int),
		provider_timeout_secs=_env("PROVIDER_TIMEOUT_SECS", None, float),
		anthropic_api_key=_env("ANTHROPIC_API_KEY", None, str),
		openai_api_key=_env("OPENAI_API_KEY", None, str),
		google_api_key=_env("GOOGLE_API_KEY", None, str),
		max_upload_mb=_env("MAX_UPLOAD_MB", Settings.max_upload_mb, int),
	)


def configured_provider_order() -> list[str]:
	"""Parse OCR_PROVIDER_ORDER, falling back to the built-in order."""
	raw = os.getenv(PROVIDER_ORDER_ENV)
	if raw:
		names = [n.strip() for n in raw.split(",") if n.strip()]
		if names:
			return names
	return list(DEFAULT_PROVIDER_ORDER)
