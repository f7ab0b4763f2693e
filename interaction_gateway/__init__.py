"""Verified Discord interaction webhooks routed through a declarative registry."""
from .auth import AuthFailure, Authorized, ServerMisconfigured, Unauthorized, authenticate
from .dispatcher import ERROR, OK, Acknowledged, DispatchFailure, Failed, Responded, dispatch
from .errors import ConfigurationError, InteractionGatewayError, MissingCredentialsError
from .registry import (
    CommandDeclaration,
    ComponentHandlerDeclaration,
    Interactions,
    ModalHandlerDeclaration,
    Option,
    Registry,
    build_registry,
)

__all__ = [
    'AuthFailure', 'Authorized', 'ServerMisconfigured', 'Unauthorized', 'authenticate',
    'ERROR', 'OK', 'Acknowledged', 'DispatchFailure', 'Failed', 'Responded', 'dispatch',
    'ConfigurationError', 'InteractionGatewayError', 'MissingCredentialsError',
    'CommandDeclaration', 'ComponentHandlerDeclaration', 'Interactions',
    'ModalHandlerDeclaration', 'Option', 'Registry', 'build_registry',
]
