"""Exceptions raised by the interaction gateway.

Request-time failures (bad signatures, unknown commands, crashing handlers)
are not exceptions: they are returned as `AuthResult` and `DispatchOutcome`
values and mapped to HTTP status codes. The exceptions here cover problems
found while building the registry or registering commands.
"""


class InteractionGatewayError(Exception):
    """Base class for all gateway errors."""


class ConfigurationError(InteractionGatewayError):
    """Invalid command declarations or missing configuration."""


class MissingCredentialsError(ConfigurationError):
    """Bot token or application id missing for command registration."""
