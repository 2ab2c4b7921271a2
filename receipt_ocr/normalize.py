from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from .errors import OcrError, OcrErrorKind
from .schemas import ParsedReceipt

log = logging.getLogger(__name__)

# how much of a bad payload ends up in error messages
SNIPPET_CHARS = 200

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*[ \t]*\n?(.*?)```", re.DOTALL)
_UNIT_RE = re.compile(r"[0-9]+\s*(ml|l|kg|g|pcs|шт|л|кг|г)", re.IGNORECASE)
_NON_LETTER_RE = re.compile(r"[^a-zа-яё\s]")
_SPACES_RE = re.compile(r"\s+")


def normalize_item_name(name: str) -> str:
	"""Comparison key for an item name.

	"Orange Juice 1L" -> "orange juice", "Молоко 2.5%" -> "молоко".
	"""
	out = name.lower()
	out = _UNIT_RE.sub("", out)
	out = _NON_LETTER_RE.sub("", out)
	out = _SPACES_RE.sub(" ", out)
	return out.strip()


def strip_code_fence(text: str) -> str:
	m = _FENCE_RE.search(text)
	if m:
		return m.group(1).strip()
	return text.strip()


def _parse_failed(message: str) -> OcrError:
	return OcrError(message, OcrErrorKind.PARSE_FAILED)


def parse_llm_response(text: str | None, provider_label: str) -> ParsedReceipt:
	if not text or not text.strip():
		raise _parse_failed(f"{provider_label} returned empty response")

	body = strip_code_fence(text)

	try:
		data: Any = json.loads(body)
	except json.JSONDecodeError as exc:
		log.error(
			"ocr response is not json",
			extra={
				"provider": provider_label,
				"error": str(exc),
				"response_start": body[:300],
			},
		)
		raise _parse_failed(
			f"Failed to parse {provider_label} response as JSON. "
			f"Response: {body[:SNIPPET_CHARS]}..."
		) from exc

	if not isinstance(data, dict) or not isinstance(data.get("items"), list):
		raise _parse_failed("Invalid receipt format: missing or invalid items array")

	items = []
	for item in data["items"]:
		if not isinstance(item, dict):
			raise _parse_failed("Invalid receipt format: item is not an object")
		name = item.get("name")
		items.append({**item, "normalizedName": normalize_item_name(str(name or ""))})

	try:
		return ParsedReceipt.model_validate({**data, "items": items})
	except ValidationError as exc:
		raise _parse_failed(
			f"Invalid receipt format from {provider_label}: "
			f"{exc.error_count()} validation error(s)"
		) from exc
