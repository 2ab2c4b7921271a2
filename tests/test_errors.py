from __future__ import annotations

import pytest

from receipt_ocr.errors import (
	NoProvidersAvailableError,
	OcrError,
	OcrErrorKind,
	classify_provider_error,
	is_provider_unavailable_error,
	to_ocr_error,
)


@pytest.mark.parametrize(
	"message, kind",
	[
		("Your credit balance is too low", OcrErrorKind.BILLING_DISABLED),
		("Billing hard limit reached", OcrErrorKind.BILLING_DISABLED),
		("insufficient_quota", OcrErrorKind.BILLING_DISABLED),
		("Request failed: 429", OcrErrorKind.RATE_LIMITED),
		("Rate limit exceeded", OcrErrorKind.RATE_LIMITED),
		("rate_limit_error", OcrErrorKind.RATE_LIMITED),
		("503 Service Unavailable", OcrErrorKind.PROVIDER_DOWN),
		("Bad gateway (502)", OcrErrorKind.PROVIDER_DOWN),
		("API is Overloaded", OcrErrorKind.PROVIDER_DOWN),
		("Invalid API key provided", OcrErrorKind.INVALID_KEY),
		("authentication_error", OcrErrorKind.INVALID_KEY),
		("HTTP 401", OcrErrorKind.INVALID_KEY),
		("Failed to parse Claude response as JSON", OcrErrorKind.PARSE_FAILED),
		("Invalid receipt format: missing items", OcrErrorKind.PARSE_FAILED),
		("OpenAI returned empty response", OcrErrorKind.PARSE_FAILED),
		("socket hang up", OcrErrorKind.PROVIDER_DOWN),
		("", OcrErrorKind.PROVIDER_DOWN),
	],
)
def test_classify_provider_error(message, kind):
	assert classify_provider_error(Exception(message)) is kind


def test_classification_precedence_billing_before_rate_limit():
	# both phrases present: billing wins
	assert (
		classify_provider_error("429: insufficient credit")
		is OcrErrorKind.BILLING_DISABLED
	)
	# rate limit is checked before 5xx
	assert classify_provider_error("429 after 503") is OcrErrorKind.RATE_LIMITED
	# "invalid" alone is not a key problem
	assert classify_provider_error("invalid request") is OcrErrorKind.PROVIDER_DOWN


def test_classify_accepts_plain_strings():
	assert classify_provider_error("OVERLOADED") is OcrErrorKind.PROVIDER_DOWN


def test_retryable_follows_kind():
	for kind in OcrErrorKind:
		err = OcrError("boom", kind)
		assert err.kind is kind
		assert err.retryable is (kind not in (OcrErrorKind.BAD_INPUT, OcrErrorKind.PARSE_FAILED))


def test_retryable_cannot_be_set():
	err = OcrError("bad json", OcrErrorKind.PARSE_FAILED)
	with pytest.raises(AttributeError):
		err.retryable = True  # type: ignore[misc]
	assert err.retryable is False


def test_kind_accepts_string_value():
	assert OcrError("x", "RATE_LIMITED").kind is OcrErrorKind.RATE_LIMITED
	with pytest.raises(ValueError):
		OcrError("x", "NOT_A_KIND")


def test_to_ocr_error_passes_tagged_errors_through():
	tagged = OcrError("bad json", OcrErrorKind.PARSE_FAILED)
	assert to_ocr_error(tagged) is tagged


def test_to_ocr_error_wraps_and_chains():
	raw = ConnectionError("Request failed: 429")
	err = to_ocr_error(raw)
	assert err.kind is OcrErrorKind.RATE_LIMITED
	assert err.message == "Request failed: 429"
	assert err.__cause__ is raw


def test_to_ocr_error_uses_type_name_for_empty_message():
	err = to_ocr_error(TimeoutError())
	assert err.message == "TimeoutError"
	assert err.kind is OcrErrorKind.PROVIDER_DOWN


def test_is_provider_unavailable_error():
	assert is_provider_unavailable_error(Exception("credit balance is too low"))
	assert is_provider_unavailable_error(Exception("Request failed: 429"))
	assert is_provider_unavailable_error(Exception("API is overloaded"))
	assert not is_provider_unavailable_error(
		Exception("Failed to parse Claude response as JSON")
	)
	assert not is_provider_unavailable_error(OcrError("bad", OcrErrorKind.BAD_INPUT))


def test_no_providers_error_is_not_an_ocr_error():
	err = NoProvidersAvailableError(["anthropic", "openai"])
	assert not isinstance(err, OcrError)
	assert str(err).startswith("No OCR providers available")
	assert err.order == ["anthropic", "openai"]
