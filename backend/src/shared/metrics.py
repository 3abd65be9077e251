from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource


def setup_metrics(app_name: str) -> MeterProvider:
    """Configure OpenTelemetry metrics with Prometheus and console readers."""

    resource = Resource.create({"service.name": app_name})

    # Pull model; the reader registers with the prometheus_client default registry
    prometheus_reader = PrometheusMetricReader()

    console_reader = PeriodicExportingMetricReader(ConsoleMetricExporter())

    provider = MeterProvider(resource=resource, metric_readers=[prometheus_reader, console_reader])

    metrics.set_meter_provider(provider)
    return provider
