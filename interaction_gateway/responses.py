"""Interaction response builders and outcome encoding."""
from typing import Any, Dict, List, Optional, Tuple

from .dispatcher import Acknowledged, DispatchOutcome, Failed, Responded
from .enums import InteractionResponseType, MessageFlags

INTERNAL_ERROR_BODY = {'error': 'Internal server error'}


def pong() -> Dict[str, Any]:
    """Response to a PING interaction."""
    return {'type': int(InteractionResponseType.PONG)}


def _message_data(content: Optional[str], embeds: Optional[List[dict]],
                  components: Optional[List[dict]], **extra) -> Dict[str, Any]:
    data = {}
    if content is not None:
        data['content'] = content
    if embeds:
        data['embeds'] = embeds
    if components:
        data['components'] = components
    data.update({key: value for key, value in extra.items() if value is not None})
    return data


def channel_message_with_source(content: str = None, embeds: List[dict] = None,
                                components: List[dict] = None, **extra) -> Dict[str, Any]:
    """Respond to an interaction with a message.

    Args:
        content: Message text
        embeds: List of embed dicts
        components: List of component dicts (action rows)
        **extra: Other message fields (allowed_mentions, tts, flags, ...)
    """
    return {
        'type': int(InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE),
        'data': _message_data(content, embeds, components, **extra)
    }


def deferred_channel_message_with_source(**extra) -> Dict[str, Any]:
    """ACK now, send the message later as a follow-up."""
    return {
        'type': int(InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE),
        'data': _message_data(None, None, None, **extra)
    }


def deferred_update_message() -> Dict[str, Any]:
    """ACK a component interaction, edit the original message later."""
    return {'type': int(InteractionResponseType.DEFERRED_UPDATE_MESSAGE)}


def update_message(content: str = None, embeds: List[dict] = None,
                   components: List[dict] = None, **extra) -> Dict[str, Any]:
    """Edit the message a component was attached to."""
    return {
        'type': int(InteractionResponseType.UPDATE_MESSAGE),
        'data': _message_data(content, embeds, components, **extra)
    }


def choice(name: str, value: Any) -> Dict[str, Any]:
    return {'name': name, 'value': value}


def autocomplete_result(choices: List[dict]) -> Dict[str, Any]:
    """Suggestions for an autocomplete interaction (Discord shows at most 25)."""
    return {
        'type': int(InteractionResponseType.APPLICATION_COMMAND_AUTOCOMPLETE_RESULT),
        'data': {'choices': list(choices)}
    }


def modal(custom_id: str, title: str, components: List[dict]) -> Dict[str, Any]:
    """Show a modal form."""
    return {
        'type': int(InteractionResponseType.MODAL),
        'data': {'custom_id': custom_id, 'title': title, 'components': components}
    }


def premium_required() -> Dict[str, Any]:
    """Tell the user the action needs a premium subscription."""
    return {'type': int(InteractionResponseType.PREMIUM_REQUIRED)}


def launch_activity() -> Dict[str, Any]:
    return {'type': int(InteractionResponseType.LAUNCH_ACTIVITY)}


def _with_data(response: Dict[str, Any], **fields) -> Dict[str, Any]:
    # Copies; the given response is left untouched
    data = dict(response.get('data') or {})
    data.update(fields)
    return {**response, 'data': data}


def _with_flag(response: Dict[str, Any], flag: MessageFlags) -> Dict[str, Any]:
    flags = (response.get('data') or {}).get('flags', 0)
    return _with_data(response, flags=flags | int(flag))


def ephemeral(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a message response visible only to the invoking user."""
    return _with_flag(response, MessageFlags.EPHEMERAL)


def suppress_embeds(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a message response without link embeds."""
    return _with_flag(response, MessageFlags.SUPPRESS_EMBEDS)


def suppress_notifications(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a message response that triggers no push notification."""
    return _with_flag(response, MessageFlags.SUPPRESS_NOTIFICATIONS)


def use_components_v2(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a message response laid out with components v2.

    Discord then rejects `content` and `embeds` on the message.
    """
    return _with_flag(response, MessageFlags.IS_COMPONENTS_V2)


def tts(response: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a message response read out with text-to-speech."""
    return _with_data(response, tts=True)


def encode_outcome(outcome: DispatchOutcome) -> Tuple[Optional[Dict[str, Any]], int]:
    """Map a dispatch outcome to (JSON body or None, HTTP status).

    Failure reasons are logged by the dispatcher and never sent to the caller.
    """
    if isinstance(outcome, Responded):
        return outcome.payload, 200
    if isinstance(outcome, Acknowledged):
        return None, 202
    if isinstance(outcome, Failed):
        return INTERNAL_ERROR_BODY, 500
    raise TypeError(f"Not a dispatch outcome: {outcome!r}")
