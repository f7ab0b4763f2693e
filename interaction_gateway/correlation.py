"""Request correlation and request logging for Flask and Functions Framework."""
import time
import uuid
from functools import wraps
from typing import Callable

from flask import g, request
from werkzeug.exceptions import HTTPException


def get_correlation_id(req=None) -> str:
    """Get or generate a correlation ID.

    Checks X-Correlation-ID, then X-Request-ID, then generates a UUID.
    """
    if req is not None:
        return (
            req.headers.get('X-Correlation-ID') or
            req.headers.get('X-Request-ID') or
            str(uuid.uuid4())
        )
    return str(uuid.uuid4())


def add_correlation_middleware(app, logger):
    """Add correlation and logging hooks to a Flask app.

    - extracts or generates a correlation ID per request (`g.correlation_id`)
    - logs request start and completion with timing
    - echoes the correlation ID in the X-Correlation-ID response header
    - logs unhandled exceptions and answers 500 without leaking details
    """

    @app.before_request
    def before_request():
        g.correlation_id = get_correlation_id(request)
        g.start_time = time.time()

        logger.info(
            "Request started",
            correlation_id=g.correlation_id,
            method=request.method,
            path=request.path,
            user_agent=request.headers.get('User-Agent'),
            remote_addr=request.remote_addr
        )

    @app.after_request
    def after_request(response):
        if hasattr(g, 'start_time'):
            duration_ms = (time.time() - g.start_time) * 1000
            logger.info(
                "Request completed",
                correlation_id=getattr(g, 'correlation_id', None),
                method=request.method,
                path=request.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2)
            )

        if hasattr(g, 'correlation_id'):
            response.headers['X-Correlation-ID'] = g.correlation_id
        return response

    @app.errorhandler(Exception)
    def handle_exception(error):
        if isinstance(error, HTTPException):
            return error

        logger.error(
            "Unhandled exception",
            error=error,
            correlation_id=getattr(g, 'correlation_id', None),
            method=request.method,
            path=request.path
        )
        return {'error': 'Internal server error'}, 500


def with_correlation(logger):
    """Decorator adding correlation tracking to a Functions Framework handler.

    The wrapped handler receives the request as its first argument; the
    correlation ID is stored on it as `request.correlation_id` and returned
    in the X-Correlation-ID header.

    Usage:
        @http
        @with_correlation(logger)
        def interactions(request):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(req, *args, **kwargs):
            correlation_id = get_correlation_id(req)
            req.correlation_id = correlation_id
            start_time = time.time()

            logger.info(
                "Request started",
                correlation_id=correlation_id,
                method=req.method,
                path=req.path
            )

            response = func(req, *args, **kwargs)

            logger.info(
                "Request completed",
                correlation_id=correlation_id,
                method=req.method,
                path=req.path,
                status_code=response.status_code,
                duration_ms=round((time.time() - start_time) * 1000, 2)
            )
            response.headers['X-Correlation-ID'] = correlation_id
            return response

        return wrapper
    return decorator
