from .errors import (
	NoProvidersAvailableError,
	OcrError,
	OcrErrorKind,
	classify_provider_error,
	is_provider_unavailable_error,
)
from .normalize import normalize_item_name, parse_llm_response
from .orchestrator import OcrOrchestrator, run_ocr
from .registry import ProviderRegistry
from .schemas import ImageInput, OcrResult, ParsedReceipt, ParsedReceiptItem

__all__ = [
	"ImageInput",
	"NoProvidersAvailableError",
	"OcrError",
	"OcrErrorKind",
	"OcrOrchestrator",
	"OcrResult",
	"ParsedReceipt",
	"ParsedReceiptItem",
	"ProviderRegistry",
	"classify_provider_error",
	"is_provider_unavailable_error",
	"normalize_item_name",
	"parse_llm_response",
	"run_ocr",
]
