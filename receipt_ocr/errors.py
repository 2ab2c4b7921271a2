from __future__ import annotations

from enum import Enum


class OcrErrorKind(str, Enum):
	RATE_LIMITED = "RATE_LIMITED"
	PROVIDER_DOWN = "PROVIDER_DOWN"
	BILLING_DISABLED = "BILLING_DISABLED"
	INVALID_KEY = "INVALID_KEY"
	BAD_INPUT = "BAD_INPUT"
	PARSE_FAILED = "PARSE_FAILED"

	@property
	def retryable(self) -> bool:
		return self not in _TERMINAL_KINDS


# same image fails the same way on every backend
_TERMINAL_KINDS = frozenset({OcrErrorKind.BAD_INPUT, OcrErrorKind.PARSE_FAILED})


class OcrError(Exception):
	"""A provider failure tagged with its error kind.

	``retryable`` is derived from ``kind`` when the error is built and is
	read-only afterwards.
	"""

	def __init__(self, message: str, kind: OcrErrorKind | str) -> None:
		super().__init__(message)
		self.message = message
		self._kind = OcrErrorKind(kind)
		self._retryable = self._kind.retryable

	@property
	def kind(self) -> OcrErrorKind:
		return self._kind

	@property
	def retryable(self) -> bool:
		return self._retryable

	def __repr__(self) -> str:
		return f"OcrError({self.message!r}, {self._kind.value})"


class NoProvidersAvailableError(RuntimeError):
	"""No provider in the try-order could even be attempted."""

	def __init__(self, order: list[str]) -> None:
		super().__init__(
			"No OCR providers available (order: "
			f"{', '.join(order) or 'empty'}); check registration and API keys"
		)
		self.order = list(order)


# (kind, any-of phrases); first matching rule wins
_RULES: tuple[tuple[OcrErrorKind, tuple[str, ...]], ...] = (
	(OcrErrorKind.BILLING_DISABLED, ("billing", "credit", "insufficient")),
	(OcrErrorKind.RATE_LIMITED, ("rate limit", "rate-limit", "rate_limit", "ratelimit", "429")),
	(OcrErrorKind.PROVIDER_DOWN, ("503", "502", "overloaded")),
)

_PARSE_PHRASES = ("failed to parse", "invalid receipt format", "empty response")


def _message_of(err: BaseException | str) -> str:
	if isinstance(err, str):
		return err
	msg = str(err)
	return msg or type(err).__name__


def classify_provider_error(err: BaseException | str) -> OcrErrorKind:
	"""Map an arbitrary backend failure onto an error kind.

	Matching is case-insensitive on the message. Anything unrecognised is
	treated as ``PROVIDER_DOWN`` so the next provider still gets a chance.
	"""
	text = _message_of(err).lower()

	for kind, phrases in _RULES:
		if any(p in text for p in phrases):
			return kind

	if ("invalid" in text and "key" in text) or "authentication" in text or "401" in text:
		return OcrErrorKind.INVALID_KEY

	if any(p in text for p in _PARSE_PHRASES):
		return OcrErrorKind.PARSE_FAILED

	return OcrErrorKind.PROVIDER_DOWN


def to_ocr_error(err: BaseException) -> OcrError:
	if isinstance(err, OcrError):
		return err
	tagged = OcrError(_message_of(err), classify_provider_error(err))
	tagged.__cause__ = err
	return tagged


def is_provider_unavailable_error(err: BaseException | str) -> bool:
	"""True when the failure is about the backend, not about the receipt."""
	if isinstance(err, OcrError):
		return err.retryable
	return classify_provider_error(err).retryable
