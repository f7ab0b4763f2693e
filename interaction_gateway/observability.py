"""Structured JSON logging and OpenTelemetry tracing."""
import os
import json
import logging
import traceback
from datetime import datetime, timezone
from functools import wraps
from typing import Optional, Dict, Any

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor

_internal_logger = logging.getLogger(__name__)

# Process-wide tracing state; the provider can only be installed once.
_tracing_manager = None
_requests_instrumented = False


class StructuredLogger:
    """Structured logger emitting one JSON object per line."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self.logger = self._setup_logger()

    def _setup_logger(self):
        """Configure structured JSON logger."""
        logger = logging.getLogger(self.service_name)
        logger.setLevel(logging.INFO)
        logger.handlers = []

        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)

        return logger

    def _get_trace_context(self):
        """Get current trace context from OpenTelemetry."""
        span = trace.get_current_span()
        if span and span.is_recording():
            span_context = span.get_span_context()
            return {
                "trace_id": format(span_context.trace_id, '032x'),
                "span_id": format(span_context.span_id, '016x')
            }
        return {}

    def _build_log_entry(self, message: str, level: str, correlation_id: Optional[str] = None, **extra) -> Dict[str, Any]:
        """Build structured log entry with trace context."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": level,
            "service": self.service_name,
            "message": message,
        }

        trace_context = self._get_trace_context()
        if trace_context:
            entry.update(trace_context)

        if correlation_id:
            entry["correlation_id"] = correlation_id

        entry.update(extra)
        return entry

    def info(self, message: str, **kwargs):
        """Log INFO level."""
        entry = self._build_log_entry(message, "INFO", **kwargs)
        self.logger.info(json.dumps(entry, default=str))

    def warning(self, message: str, **kwargs):
        """Log WARNING level."""
        entry = self._build_log_entry(message, "WARNING", **kwargs)
        self.logger.warning(json.dumps(entry, default=str))

    def error(self, message: str, error: Optional[Exception] = None, **kwargs):
        """Log ERROR level, with the exception's stack trace when given."""
        if error:
            kwargs["error"] = {
                "type": type(error).__name__,
                "message": str(error),
                "stacktrace": ''.join(
                    traceback.format_exception(type(error), error, error.__traceback__)
                )
            }
        entry = self._build_log_entry(message, "ERROR", **kwargs)
        self.logger.error(json.dumps(entry, default=str))

    def debug(self, message: str, **kwargs):
        """Log DEBUG level."""
        entry = self._build_log_entry(message, "DEBUG", **kwargs)
        self.logger.debug(json.dumps(entry, default=str))


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record):
        """Format log record as JSON if not already formatted."""
        if isinstance(record.msg, str) and record.msg.startswith('{'):
            return record.msg

        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
        }
        return json.dumps(log_obj)


class TracingManager:
    """OpenTelemetry tracing manager."""

    def __init__(self, service_name: str, environment: str = "production"):
        self.service_name = service_name
        self.environment = environment
        self.tracer = self._setup_tracer()

    def _setup_tracer(self):
        """Install a tracer provider, exporting to Cloud Trace outside local dev."""
        resource = Resource.create({
            "service.name": self.service_name,
            "service.namespace": "discord-interactions",
            "deployment.environment": self.environment,
        })

        tracer_provider = TracerProvider(resource=resource)

        if not os.getenv("LOCAL_DEV"):
            try:
                project_id = os.getenv('GCP_PROJECT_ID')
                cloud_trace_exporter = CloudTraceSpanExporter(project_id=project_id)
                tracer_provider.add_span_processor(BatchSpanProcessor(cloud_trace_exporter))
            except Exception as e:
                _internal_logger.warning("Could not setup Cloud Trace exporter: %s", e)

        trace.set_tracer_provider(tracer_provider)
        return trace.get_tracer(self.service_name)

    def get_tracer(self):
        """Get the configured tracer."""
        return self.tracer

    def instrument_flask(self, app):
        """Auto-instrument a Flask application."""
        try:
            FlaskInstrumentor().instrument_app(app)
        except Exception as e:
            _internal_logger.warning("Could not instrument Flask: %s", e)

    def instrument_requests(self):
        """Auto-instrument the requests library (once per process)."""
        global _requests_instrumented
        if _requests_instrumented:
            return
        try:
            RequestsInstrumentor().instrument()
            _requests_instrumented = True
        except Exception as e:
            _internal_logger.warning("Could not instrument requests: %s", e)


def init_observability(service_name: str, app=None, environment: str = None):
    """Initialize logging and tracing for a service.

    The tracer provider is installed by the first call only; later calls
    reuse it and just create a logger under their own name.

    Args:
        service_name: Name of the service (also the logger name)
        app: Flask app instance to instrument (optional)
        environment: Environment name (defaults to $ENVIRONMENT)

    Returns:
        tuple: (logger, tracing_manager)
    """
    global _tracing_manager
    if environment is None:
        environment = os.getenv('ENVIRONMENT', 'production')

    logger = StructuredLogger(service_name)
    if _tracing_manager is None:
        _tracing_manager = TracingManager(service_name, environment)
        _tracing_manager.instrument_requests()
        logger.info("Observability initialized", environment=environment)

    if app:
        _tracing_manager.instrument_flask(app)

    return logger, _tracing_manager


def traced_function(operation_name: Optional[str] = None):
    """Decorator to trace a function with OpenTelemetry.

    Usage:
        @traced_function("dispatch_interaction")
        def dispatch(interaction, registry):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            tracer = trace.get_tracer(__name__)
            op_name = operation_name or func.__name__

            with tracer.start_as_current_span(op_name) as span:
                span.set_attribute("function.name", func.__name__)
                span.set_attribute("function.module", func.__module__)

                try:
                    result = func(*args, **kwargs)
                    span.set_attribute("function.status", "success")
                    return result
                except Exception as e:
                    span.set_attribute("function.status", "error")
                    span.set_attribute("error.type", type(e).__name__)
                    span.set_attribute("error.message", str(e))
                    span.record_exception(e)
                    raise

        return wrapper
    return decorator
