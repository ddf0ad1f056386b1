"""OpenTelemetry tracing setup for the cache layer.

Spans go to the OTLP (gRPC) exporter or to the console. Redis and SQLAlchemy
instrumentation trace the native calls made by the cachers and by the
system-of-record loader. Read-through spans come from TracedOperation.
"""

import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from entitycache.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class TelemetryConfig:
    """Tracer provider plus the instrumentation the cache layer relies on.

    Exporters: "console", "otlp" (needs an endpoint) or "none".
    """

    def __init__(
        self,
        service_name: str,
        service_version: str,
        enabled: bool = True,
        environment: str = "development",
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.environment = environment
        self.tracer_provider: TracerProvider | None = None

    def _exporter(self, exporter_type: str, otlp_endpoint: str | None) -> SpanExporter | None:
        if exporter_type == "none":
            return None
        if exporter_type == "otlp" and otlp_endpoint:
            logger.info("Exporting cache spans over OTLP to %s", otlp_endpoint)
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        if exporter_type != "console":
            logger.warning("Unknown exporter type '%s', using console", exporter_type)
        return ConsoleSpanExporter()

    def setup_telemetry(
        self,
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> TracerProvider | None:
        """Install the global tracer provider.

        Returns:
            The provider, or None when disabled or when setup failed.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=TraceIdRatioBased(sample_rate),
            )
            exporter = self._exporter(exporter_type, otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception as e:
            logger.exception("Failed to initialize telemetry: %s", e)
            return None
        self.tracer_provider = provider
        logger.info(
            "Tracing %s %s with exporter=%s",
            self.service_name,
            self.service_version,
            exporter_type,
        )
        return provider

    def instrument(self, engine: AsyncEngine | None = None) -> None:
        """Trace Redis commands, log records and (given an engine) SQL queries.

        A failing instrumentor is logged and skipped; tracing never blocks reads.
        """
        if not self.enabled or self.tracer_provider is None:
            return
        instrumentors = [
            ("Redis", RedisInstrumentor(), {}),
            ("logging", LoggingInstrumentor(), {"set_logging_format": True}),
        ]
        if engine is not None:
            instrumentors.append(
                (
                    "SQLAlchemy",
                    SQLAlchemyInstrumentor(),
                    {"engine": engine.sync_engine, "enable_commenter": True},
                )
            )
        for name, instrumentor, options in instrumentors:
            try:
                instrumentor.instrument(tracer_provider=self.tracer_provider, **options)
                logger.info("%s instrumentation enabled", name)
            except Exception as e:
                logger.exception("Failed to instrument %s: %s", name, e)

    def shutdown(self) -> None:
        """Flush pending spans and shut the provider down."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
            logger.info("Telemetry shutdown complete")
        except Exception as e:
            logger.exception("Error during telemetry shutdown: %s", e)


def configure_telemetry(
    settings: Settings | None = None, engine: AsyncEngine | None = None
) -> TelemetryConfig | None:
    """Build, install and instrument telemetry from settings.

    Returns None (and installs nothing) when TELEMETRY_ENABLED is false.
    The caller keeps the returned config and calls shutdown() on exit.
    """
    settings = settings or get_settings()
    if not settings.telemetry_enabled:
        return None
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        environment=settings.telemetry_environment,
    )
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    telemetry.instrument(engine)
    return telemetry
