import logging
import sys

from opentelemetry._logs import set_logger_provider
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor, ConsoleLogRecordExporter

from .config import settings


def setup_logging() -> LoggerProvider:
    """Configure OpenTelemetry logging with a Console exporter.

    Standard ``logging`` calls are bridged into OTel; a plain stream handler
    is kept alongside so startup output is visible before the batch flushes.
    """
    logger_provider = LoggerProvider()
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(ConsoleLogRecordExporter()))
    set_logger_provider(logger_provider)

    root = logging.getLogger()
    root.addHandler(
        LoggingHandler(level=getattr(logging, settings.LOG_LEVEL), logger_provider=logger_provider)
    )
    root.setLevel(settings.LOG_LEVEL)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )
    root.addHandler(stream_handler)

    # Silence noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logger_provider
