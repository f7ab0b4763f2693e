"""Flask application and the interaction request pipeline."""
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, g, jsonify, make_response, request

from .auth import authenticate
from .body import capture_raw_body, get_raw_body
from .config import Config
from .correlation import add_correlation_middleware
from .dispatcher import dispatch
from .errors import MissingCredentialsError
from .observability import init_observability
from .registration import register_commands
from .registry import Registry
from .responses import INTERNAL_ERROR_BODY, encode_outcome
from .rest import DiscordClient

logger, _ = init_observability('discord-interactions-http')


def handle_interaction_request(req, registry: Registry, config: Config,
                               correlation_id: Optional[str] = None):
    """Run one Discord interaction request through the full pipeline.

    method check -> raw body capture -> authentication -> JSON decode
    -> dispatch -> response encoding

    Args:
        req: Flask/Functions Framework request object
        registry: Registry built at startup
        config: Application configuration (public key)
        correlation_id: Correlation ID for logging

    Returns:
        Flask Response
    """
    if req.method != 'POST':
        return make_response(jsonify({'error': 'Method not allowed'}), 405)

    capture_raw_body(req)

    verdict = authenticate(get_raw_body(req), req.headers, config.DISCORD_PUBLIC_KEY, correlation_id)
    if not verdict.authorized:
        error = 'Unauthorized' if verdict.status_code == 401 else 'Internal server error'
        return make_response(jsonify({'error': error}), verdict.status_code)

    interaction = req.get_json(force=True, silent=True)
    if interaction is None:
        logger.warning("Interaction body is not valid JSON", correlation_id=correlation_id)
        return make_response(jsonify({'error': 'Bad Request - Invalid JSON'}), 400)

    body, status_code = encode_outcome(dispatch(interaction, registry, correlation_id))
    if body is None:
        return make_response('', status_code)
    try:
        encoded = jsonify(body)
    except (TypeError, ValueError) as e:
        logger.error("Handler response is not JSON serializable", error=e, correlation_id=correlation_id)
        return make_response(jsonify(INTERNAL_ERROR_BODY), 500)
    return make_response(encoded, status_code)


def run_registration(registry: Registry, config: Config, correlation_id: Optional[str] = None):
    """Register commands with Discord; returns (response_dict, status_code)."""
    try:
        client = DiscordClient.from_config(config)
    except MissingCredentialsError as e:
        logger.error("Discord tokens not configured", correlation_id=correlation_id)
        return {'error': str(e)}, 500

    summary = register_commands(registry, client, correlation_id)
    return summary, 200 if summary['status'] == 'completed' else 502


def health_payload(registry: Registry, config: Config) -> dict:
    return {
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': config.SERVICE_NAME,
        'environment': {
            'public_key_set': bool(config.DISCORD_PUBLIC_KEY),
            'bot_token_set': bool(config.DISCORD_BOT_TOKEN),
            'app_id_set': bool(config.DISCORD_APPLICATION_ID)
        },
        'commands': {
            'global': len(registry.global_commands),
            'guild': len(registry.guild_commands)
        }
    }


def create_app(registry: Registry, config: Optional[Config] = None) -> Flask:
    """Create the Flask app serving Discord interactions.

    Routes:
        /interactions       Discord interactions endpoint (POST only)
        /health             health check
        /register-commands  bulk-overwrite commands with Discord (POST)
    """
    config = config or Config()
    app = Flask(__name__)
    app_logger, _ = init_observability(config.SERVICE_NAME, app=app)
    add_correlation_middleware(app, app_logger)

    @app.before_request
    def cache_interaction_body():
        # Must run before anything touches request.form/get_json
        if request.endpoint == 'interactions' and request.method == 'POST':
            capture_raw_body(request)

    @app.route("/interactions", methods=['GET', 'HEAD', 'OPTIONS', 'POST', 'PUT', 'PATCH', 'DELETE'])
    def interactions():
        """Handle Discord interactions endpoint."""
        return handle_interaction_request(request, registry, config, g.get('correlation_id'))

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify(health_payload(registry, config))

    @app.route("/register-commands", methods=['POST'])
    def register():
        """Endpoint to register the registry's commands with Discord."""
        result, status_code = run_registration(registry, config, g.get('correlation_id'))
        return jsonify(result), status_code

    return app
