from __future__ import annotations

import asyncio

import pytest

from receipt_ocr.config import PROVIDER_ORDER_ENV, Settings
from receipt_ocr.registry import ProviderRegistry
from receipt_ocr.schemas import ImageInput, ParsedReceipt

FAKE_RECEIPT_JSON = {
	"total": 100,
	"merchant": "Test Store",
	"date": "2025-01-01",
	"currency": "USD",
	"items": [
		{
			"name": "Item",
			"normalizedName": "item",
			"quantity": 1,
			"pricePerUnit": 100,
			"totalPrice": 100,
		}
	],
}


class FakeProvider:
	"""In-memory provider that records every call it receives."""

	def __init__(
		self,
		name: str,
		result: ParsedReceipt | None = None,
		error: BaseException | None = None,
		available: bool | BaseException = True,
		delay: float = 0,
	) -> None:
		self.name = name
		self.billing_provider = name
		self.result = result or ParsedReceipt.model_validate(FAKE_RECEIPT_JSON)
		self.error = error
		self.available = available
		self.delay = delay
		self.calls: list[tuple[list[ImageInput], str, str]] = []

	def model_id(self) -> str | None:
		return f"{self.name}-model"

	def is_available(self) -> bool:
		if isinstance(self.available, BaseException):
			raise self.available
		return self.available

	async def parse_receipt(self, images, api_key, mime_type) -> ParsedReceipt:
		self.calls.append((list(images), api_key, mime_type))
		if self.delay:
			await asyncio.sleep(self.delay)
		if self.error is not None:
			raise self.error
		return self.result


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
	monkeypatch.delenv(PROVIDER_ORDER_ENV, raising=False)
	for name in ("ANTHROPIC_API_KEY", "OPENAI_API_KEY", "GOOGLE_API_KEY"):
		monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
	return Settings()


@pytest.fixture
def registry():
	reg = ProviderRegistry()
	yield reg
	reg.reset()


@pytest.fixture
def make_provider():
	return FakeProvider


@pytest.fixture
def fake_receipt() -> ParsedReceipt:
	return ParsedReceipt.model_validate(FAKE_RECEIPT_JSON)


@pytest.fixture
def images() -> list[ImageInput]:
	return [ImageInput(base64="abc", mime_type="image/jpeg")]
