from typing import Optional

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .config import settings

RESOURCE = Resource.create({"service.name": "leave-api", "deployment.env": settings.env})

tracer = trace.get_tracer("leave_api")
meter = metrics.get_meter("leave_api")

leave_transitions = meter.create_counter(
    "leave_request_transitions",
    unit="1",
    description="Leave request status transitions by target status",
)
balance_adjustments = meter.create_counter(
    "leave_balance_adjusted_days",
    unit="d",
    description="Days debited from or credited to employee balances",
)


def configure_tracing(otlp_endpoint: Optional[str] = None) -> None:
    tracer_provider = TracerProvider(resource=RESOURCE)
    endpoint = otlp_endpoint or settings.otlp_endpoint
    if endpoint:
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint))
        )
    trace.set_tracer_provider(tracer_provider)


def configure_metrics(otlp_endpoint: Optional[str] = None) -> None:
    endpoint = otlp_endpoint or settings.otlp_endpoint
    metric_reader = None
    if endpoint:
        metric_reader = PeriodicExportingMetricReader(OTLPMetricExporter(endpoint=endpoint))
    provider_kwargs = {"resource": RESOURCE}
    if metric_reader:
        provider_kwargs["metric_readers"] = [metric_reader]
    meter_provider = MeterProvider(**provider_kwargs)
    metrics.set_meter_provider(meter_provider)


def configure_observability() -> None:
    configure_tracing()
    configure_metrics()


def record_transition(status: str) -> None:
    leave_transitions.add(1, {"status": status})


def record_balance_adjustment(delta_days: int) -> None:
    direction = "credit" if delta_days > 0 else "debit"
    balance_adjustments.add(abs(delta_days), {"direction": direction})
