from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from shared.config import settings
from shared.database import dispose_engine, engine
from shared.logging import setup_logging
from shared.metrics import setup_metrics
from sshca.api import auth as auth_api
from sshca.api import config_ca as config_ca_api
from sshca.services.bootstrap import bootstrap_operator_key


# Setup OpenTelemetry Tracing
def setup_tracing() -> None:
    resource = Resource.create({"service.name": settings.APP_NAME})
    provider = TracerProvider(resource=resource)

    # Export traces to console
    processor = BatchSpanProcessor(ConsoleSpanExporter())
    provider.add_span_processor(processor)

    trace.set_tracer_provider(provider)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    setup_logging()
    setup_tracing()
    setup_metrics(settings.APP_NAME)

    LoggingInstrumentor().instrument(set_logging_format=True)
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)

    # Operator credentials for the CA endpoints
    auth_api.set_operator_key_hash(bootstrap_operator_key())

    yield
    # Shutdown
    await dispose_engine()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Instrument FastAPI
FastAPIInstrumentor.instrument_app(app)

# Include routers
app.include_router(config_ca_api.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok", "service": settings.APP_NAME}
