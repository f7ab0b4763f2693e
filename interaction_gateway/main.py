"""Functions Framework entry points for Cloud Functions Gen2.

Run locally with `functions-framework --source interaction_gateway/main.py --target interactions`.
Discord requires an answer within 3 seconds; handlers that need longer must
answer with a deferred response and follow up through the REST API.
"""
from flask import Request, jsonify, make_response
from functions_framework import http

from interaction_gateway.app import handle_interaction_request, health_payload, run_registration
from interaction_gateway.commands import registry
from interaction_gateway.config import Config
from interaction_gateway.correlation import with_correlation
from interaction_gateway.observability import init_observability, traced_function
from interaction_gateway.rest import DiscordClient
from interaction_gateway.registration import register_commands

config = Config()
logger, tracing = init_observability(config.SERVICE_NAME)


def auto_register():
    """Register commands at cold start when enabled and configured."""
    if not config.AUTO_REGISTER_COMMANDS:
        return None
    if not config.registration_configured:
        logger.info("Skipping command registration, Discord tokens not configured")
        return None
    return register_commands(registry, DiscordClient.from_config(config))


auto_register()


@http
@with_correlation(logger)
@traced_function("interactions_handler")
def interactions(request: Request):
    """Discord interactions endpoint."""
    return handle_interaction_request(request, registry, config, request.correlation_id)


@http
@with_correlation(logger)
@traced_function("register_handler")
def register(request: Request):
    """Register the registry's commands with Discord (POST only)."""
    if request.method != 'POST':
        return make_response(jsonify({'error': 'Method not allowed'}), 405)
    result, status_code = run_registration(registry, config, request.correlation_id)
    return make_response(jsonify(result), status_code)


@http
@with_correlation(logger)
def health(request: Request):
    """Health check endpoint."""
    return make_response(jsonify(health_payload(registry, config)), 200)
