from __future__ import annotations

import argparse
import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import SERVICE_NAME, Settings, load_settings
from .logging import configure_logging
from .providers import register_builtin_providers
from .registry import ProviderRegistry
from .service import ReceiptService
from .transport.rest import build_router
from .version import get_version_info

log = logging.getLogger(__name__)


def setup_tracing(app: FastAPI, settings: Settings) -> None:
	if not settings.otlp_endpoint:
		log.info("tracing disabled (no OTLP_ENDPOINT)")
		return

	resource = Resource.create({"service.name": SERVICE_NAME})
	provider = TracerProvider(resource=resource)
	exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True)
	provider.add_span_processor(BatchSpanProcessor(exporter))
	trace.set_tracer_provider(provider)

	FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
	log.info("tracing enabled", extra={"otlp_endpoint": settings.otlp_endpoint})


def create_app(
	settings: Settings | None = None, registry: ProviderRegistry | None = None
) -> FastAPI:
	settings = settings or load_settings()
	registry = registry or ProviderRegistry()
	svc = ReceiptService(settings, registry)

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		log.info("starting service", extra=get_version_info())
		setup_tracing(app, settings)
		register_builtin_providers(registry, settings)
		log.info("ready", extra={"provider_order": registry.resolve_order()})
		yield

	app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
	app.state.receipt_service = svc
	app.include_router(build_router(settings, svc))
	return app


def main() -> None:
	parser = argparse.ArgumentParser(
		prog=SERVICE_NAME, description="Receipt OCR service with provider fallback"
	)
	parser.add_argument("--host", default="0.0.0.0", help="bind address")
	parser.add_argument(
		"--port", type=int, default=8000, help="HTTP port (default: 8000)"
	)
	args = parser.parse_args()

	settings = load_settings()
	configure_logging(
		service=SERVICE_NAME, json_mode=settings.json_logs, level=settings.log_level
	)

	try:
		uvicorn.run(
			create_app(settings), host=args.host, port=args.port, log_config=None
		)
	except Exception as e:
		log.error("Server failed to start", extra={"error": str(e)})
		sys.exit(1)


if __name__ == "__main__":
	main()
