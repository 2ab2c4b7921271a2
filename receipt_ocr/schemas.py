from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ImageMimeType = Literal["image/jpeg", "image/png", "image/webp", "image/gif"]


class ImageInput(BaseModel):
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	base64: str
	mime_type: ImageMimeType = Field(default="image/jpeg", alias="mimeType")


class ParsedReceiptItem(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	name: str
	normalized_name: str = Field(alias="normalizedName")
	quantity: float = 1
	price_per_unit: float = Field(default=0, alias="pricePerUnit")
	total_price: float = Field(default=0, alias="totalPrice")
	# per-item override for mixed-currency receipts
	currency: Optional[str] = None

	@field_validator("quantity", "price_per_unit", "total_price", mode="before")
	@classmethod
	def _null_is_default(cls, v, info):
		# models write null for values they could not read
		if v is None:
			return cls.model_fields[info.field_name].default
		return v


class ParsedReceipt(BaseModel):
	total: Optional[float] = None
	merchant: Optional[str] = None
	date: Optional[str] = None
	currency: Optional[str] = None
	items: list[ParsedReceiptItem] = Field(default_factory=list)


class OcrResult(BaseModel):
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	receipt: ParsedReceipt
	provider: str
	providers_tried: list[str] = Field(alias="providersTried")
	fallback_reason: Optional[str] = Field(default=None, alias="fallbackReason")
	latency_ms: int = Field(alias="latencyMs")


class ProviderState(BaseModel):
	name: str
	billing_provider: str
	available: bool
	model: Optional[str] = None


class OcrProviderHealth(BaseModel):
	name: str
	registered: bool
	available: bool
	has_system_key: bool


class OcrHealth(BaseModel):
	status: Literal["ok", "degraded", "down"]
	provider_order: list[str]
	registered_providers: list[str]
	providers: list[OcrProviderHealth]
	providers_configured: int
	providers_with_keys: int
	timestamp: str


class ErrorBody(BaseModel):
	code: str
	message: str
	details: dict = Field(default_factory=dict)


class ErrorResponse(BaseModel):
	error: ErrorBody
