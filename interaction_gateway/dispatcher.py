"""Interaction dispatch: pick a handler, invoke it, normalize the result."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from .enums import InteractionResponseType, InteractionType
from .observability import init_observability, traced_function
from .registry import Registry

logger, _ = init_observability('discord-interactions-dispatcher')

# Handler result markers
OK = 'ok'
ERROR = 'error'


class DispatchFailure(Enum):
    """Reason an interaction could not be answered."""
    UNKNOWN_COMMAND = 'unknown_command'
    NO_AUTOCOMPLETE_HANDLER = 'no_autocomplete_handler'
    NO_COMPONENT_HANDLER = 'no_component_handler'
    NO_MODAL_HANDLER = 'no_modal_handler'
    UNKNOWN_INTERACTION_TYPE = 'unknown_interaction_type'
    HANDLER_REPORTED_ERROR = 'handler_reported_error'
    HANDLER_CRASHED = 'handler_crashed'


class DispatchOutcome:
    """Base class for dispatch results."""


@dataclass(frozen=True)
class Acknowledged(DispatchOutcome):
    """Handler succeeded without a response payload."""


@dataclass(frozen=True)
class Responded(DispatchOutcome):
    payload: Any


@dataclass(frozen=True)
class Failed(DispatchOutcome):
    reason: DispatchFailure
    detail: Optional[str] = None


def normalize_result(result) -> DispatchOutcome:
    """Map a handler's return value to an outcome.

    dict or (OK, dict)        -> Responded
    None or OK                -> Acknowledged
    ERROR or (ERROR, detail)  -> Failed(HANDLER_REPORTED_ERROR)

    An interaction response is always a JSON object, so a payload must be a
    dict. Anything else, including `(OK, [...])`, is logged and reported as
    Failed(HANDLER_REPORTED_ERROR).
    """
    if isinstance(result, dict):
        return Responded(result)
    if result is None or (isinstance(result, str) and result == OK):
        return Acknowledged()
    if isinstance(result, str) and result == ERROR:
        return Failed(DispatchFailure.HANDLER_REPORTED_ERROR)
    if isinstance(result, tuple) and len(result) == 2:
        marker, value = result
        if marker == OK and isinstance(value, dict):
            return Responded(value)
        if marker == ERROR:
            return Failed(DispatchFailure.HANDLER_REPORTED_ERROR, detail=str(value))

    logger.error("Handler returned an unrecognized result", result_type=type(result).__name__)
    return Failed(DispatchFailure.HANDLER_REPORTED_ERROR, detail='unrecognized handler result')


def _invoke(handler: Callable, interaction: dict, label: str, correlation_id: Optional[str]) -> DispatchOutcome:
    """Call a handler, containing any exception it raises."""
    try:
        result = handler(interaction)
    except Exception as e:
        logger.error(
            "Interaction handler crashed",
            error=e,
            handler=label,
            correlation_id=correlation_id
        )
        return Failed(DispatchFailure.HANDLER_CRASHED, detail=type(e).__name__)

    outcome = normalize_result(result)
    if isinstance(outcome, Failed):
        logger.error(
            "Interaction handler reported an error",
            handler=label,
            detail=outcome.detail,
            correlation_id=correlation_id
        )
    return outcome


def _command_name(interaction: dict) -> Optional[str]:
    data = interaction.get('data')
    if isinstance(data, dict):
        return data.get('name')
    return None


def _handle_ping(interaction, registry, correlation_id):
    return Responded({'type': int(InteractionResponseType.PONG)})


def _handle_application_command(interaction, registry, correlation_id):
    name = _command_name(interaction)
    entry = registry.lookup(name, interaction.get('guild_id')) if name else None
    if entry is None:
        logger.error(
            "Unknown application command",
            command_name=name,
            guild_id=interaction.get('guild_id'),
            correlation_id=correlation_id
        )
        return Failed(DispatchFailure.UNKNOWN_COMMAND, detail=name)
    return _invoke(entry.handler, interaction, f"command:{name}", correlation_id)


def _handle_autocomplete(interaction, registry, correlation_id):
    name = _command_name(interaction)
    entry = registry.lookup(name, interaction.get('guild_id')) if name else None
    if entry is None:
        logger.error("Autocomplete for unknown command", command_name=name, correlation_id=correlation_id)
        return Failed(DispatchFailure.UNKNOWN_COMMAND, detail=name)
    if entry.autocomplete_handler is None:
        logger.error("No autocomplete handler registered", command_name=name, correlation_id=correlation_id)
        return Failed(DispatchFailure.NO_AUTOCOMPLETE_HANDLER, detail=name)
    return _invoke(entry.autocomplete_handler, interaction, f"autocomplete:{name}", correlation_id)


def _handle_component(interaction, registry, correlation_id):
    if registry.component_handler is None:
        logger.error("No message component handler registered", correlation_id=correlation_id)
        return Failed(DispatchFailure.NO_COMPONENT_HANDLER)
    return _invoke(registry.component_handler, interaction, 'message_component', correlation_id)


def _handle_modal(interaction, registry, correlation_id):
    if registry.modal_handler is None:
        logger.error("No modal submit handler registered", correlation_id=correlation_id)
        return Failed(DispatchFailure.NO_MODAL_HANDLER)
    return _invoke(registry.modal_handler, interaction, 'modal_submit', correlation_id)


ROUTES: Dict[InteractionType, Callable] = {
    InteractionType.PING: _handle_ping,
    InteractionType.APPLICATION_COMMAND: _handle_application_command,
    InteractionType.APPLICATION_COMMAND_AUTOCOMPLETE: _handle_autocomplete,
    InteractionType.MESSAGE_COMPONENT: _handle_component,
    InteractionType.MODAL_SUBMIT: _handle_modal,
}

_unrouted = set(InteractionType) - set(ROUTES)
if _unrouted:
    raise RuntimeError(f"No dispatch route for interaction types: {sorted(_unrouted)}")


@traced_function("dispatch_interaction")
def dispatch(interaction: dict, registry: Registry, correlation_id: Optional[str] = None) -> DispatchOutcome:
    """Route an interaction to its handler.

    Application commands and autocompletes resolve guild-scoped entries
    before global ones. Handler exceptions never escape: they become
    Failed(HANDLER_CRASHED).

    Args:
        interaction: Decoded interaction payload
        registry: Registry built from the application's declarations
        correlation_id: Correlation ID for logging

    Returns:
        Acknowledged, Responded(payload) or Failed(reason)
    """
    raw_type = interaction.get('type') if isinstance(interaction, dict) else None
    try:
        if isinstance(raw_type, bool) or not isinstance(raw_type, int):
            raise ValueError(raw_type)
        interaction_type = InteractionType(raw_type)
    except ValueError:
        logger.error(
            "Unknown interaction type",
            interaction_type=raw_type,
            correlation_id=correlation_id
        )
        return Failed(DispatchFailure.UNKNOWN_INTERACTION_TYPE, detail=repr(raw_type))

    return ROUTES[interaction_type](interaction, registry, correlation_id)
