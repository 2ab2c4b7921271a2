from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Sequence

from opentelemetry import trace

from .config import Settings, load_settings
from .errors import NoProvidersAvailableError, OcrError, OcrErrorKind, to_ocr_error
from .registry import ProviderRegistry, probe_available
from .schemas import ImageInput, ImageMimeType, OcrResult, ParsedReceipt

log = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

KeyResolver = Callable[[str], Optional[str]]


def _span_value(value: Any) -> Any:
	if isinstance(value, (str, bool, int, float)):
		return value
	if isinstance(value, (list, tuple)):
		return [str(v) for v in value]
	return str(value)


def _emit(span: trace.Span, level: int, event: str, **fields: Any) -> None:
	# telemetry never changes the outcome of a run
	try:
		log.log(level, event, extra=fields)
		span.add_event(
			event,
			{k: _span_value(v) for k, v in fields.items() if v is not None},
		)
	except Exception as e:
		log.debug("telemetry emit failed for %s: %s", event, e)


def _fallback_reason(provider_name: str, err: OcrError) -> str:
	return f"{provider_name}: {err.kind.value} — {err.message}"


class OcrOrchestrator:
	"""Walks the try-order one provider at a time until one parses the receipt."""

	def __init__(
		self, registry: ProviderRegistry, settings: Settings | None = None
	) -> None:
		self.registry = registry
		self.settings = settings or load_settings()

	async def _invoke(
		self,
		provider,
		images: Sequence[ImageInput],
		api_key: str,
		mime_type: ImageMimeType,
	) -> ParsedReceipt:
		call = provider.parse_receipt(images, api_key, mime_type)
		timeout = self.settings.provider_timeout_secs
		if timeout is None:
			return await call
		try:
			return await asyncio.wait_for(call, timeout=timeout)
		except asyncio.TimeoutError as exc:
			raise OcrError(
				f"{provider.name} did not respond within {timeout:g}s",
				OcrErrorKind.PROVIDER_DOWN,
			) from exc

	async def run_ocr(
		self,
		images: Sequence[ImageInput],
		mime_type: ImageMimeType,
		resolve_key: KeyResolver,
	) -> OcrResult:
		order = self.registry.resolve_order()
		tried: list[str] = []
		last_error: OcrError | None = None
		fallback_reason: str | None = None

		with tracer.start_as_current_span("ocr.run") as span:
			span.set_attribute("ocr.order", order)
			span.set_attribute("ocr.images", len(images))

			for name in order:
				provider = self.registry.get(name)
				if provider is None:
					_emit(span, logging.INFO, "ocr.skip", provider=name, reason="not registered")
					continue

				if not probe_available(provider):
					_emit(span, logging.INFO, "ocr.skip", provider=name, reason="unavailable")
					continue

				api_key = resolve_key(name)
				if not api_key:
					_emit(span, logging.INFO, "ocr.skip", provider=name, reason="no api key")
					continue

				tried.append(name)
				t0 = time.perf_counter()

				try:
					receipt = await self._invoke(provider, images, api_key, mime_type)
				except Exception as exc:
					# only errors a provider tagged itself can stop the walk
					if isinstance(exc, OcrError) and not exc.retryable:
						span.set_attribute("ocr.providers_tried", tried)
						_emit(
							span,
							logging.ERROR,
							"ocr.failed",
							provider=name,
							providers_tried=list(tried),
							error_kind=exc.kind.value,
							error=exc.message,
						)
						raise

					err = to_ocr_error(exc)
					last_error = err
					fallback_reason = _fallback_reason(name, err)
					_emit(
						span,
						logging.WARNING,
						"ocr.fallback",
						provider=name,
						providers_tried=list(tried),
						error_kind=err.kind.value,
						error=err.message,
					)
					continue

				latency_ms = int((time.perf_counter() - t0) * 1000)
				result = OcrResult(
					receipt=receipt,
					provider=name,
					providers_tried=list(tried),
					fallback_reason=fallback_reason,
					latency_ms=latency_ms,
				)
				span.set_attribute("ocr.provider", name)
				span.set_attribute("ocr.providers_tried", tried)
				_emit(
					span,
					logging.INFO,
					"ocr.success",
					provider=name,
					providers_tried=list(tried),
					fallback_reason=fallback_reason,
					latency_ms=latency_ms,
					items=len(receipt.items),
				)
				return result

			span.set_attribute("ocr.providers_tried", tried)

			if not tried:
				_emit(span, logging.ERROR, "ocr.no_providers", order=order)
				raise NoProvidersAvailableError(order)

			if last_error is None:
				raise RuntimeError(f"providers {tried} were attempted but no error was recorded")
			_emit(
				span,
				logging.ERROR,
				"ocr.exhausted",
				providers_tried=list(tried),
				error_kind=last_error.kind.value,
				error=last_error.message,
			)
			raise last_error


async def run_ocr(
	images: Sequence[ImageInput],
	mime_type: ImageMimeType,
	resolve_key: KeyResolver,
	registry: ProviderRegistry | None = None,
) -> OcrResult:
	if registry is None:
		from .providers import default_registry

		registry = default_registry()
	return await OcrOrchestrator(registry).run_ocr(images, mime_type, resolve_key)
