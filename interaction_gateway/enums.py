"""Discord wire codes for interactions, commands and options."""
from enum import IntEnum
from typing import Type, TypeVar, Union

from .errors import ConfigurationError

E = TypeVar('E', bound=IntEnum)


class InteractionType(IntEnum):
    """Type of an inbound interaction."""
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class CommandType(IntEnum):
    """Kind of an application command."""
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3


class OptionType(IntEnum):
    """Type of an application command option."""
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


class ChannelType(IntEnum):
    """Channel kinds usable in `channel_types` of a CHANNEL option."""
    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GROUP_DM = 3
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5
    ANNOUNCEMENT_THREAD = 10
    PUBLIC_THREAD = 11
    PRIVATE_THREAD = 12
    GUILD_STAGE_VOICE = 13
    GUILD_DIRECTORY = 14
    GUILD_FORUM = 15
    GUILD_MEDIA = 16


class InteractionResponseType(IntEnum):
    """Type of an interaction response."""
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5
    DEFERRED_UPDATE_MESSAGE = 6
    UPDATE_MESSAGE = 7
    APPLICATION_COMMAND_AUTOCOMPLETE_RESULT = 8
    MODAL = 9
    PREMIUM_REQUIRED = 10
    LAUNCH_ACTIVITY = 12


class MessageFlags(IntEnum):
    """Message flags settable on an interaction response."""
    SUPPRESS_EMBEDS = 2
    EPHEMERAL = 64
    SUPPRESS_NOTIFICATIONS = 4096
    IS_COMPONENTS_V2 = 32768


def coerce_enum(enum_cls: Type[E], value: Union[E, int, str], what: str) -> E:
    """Convert an enum member, wire integer or symbolic name to `enum_cls`.

    Names are matched case-insensitively (`"string"`, `"STRING"`).

    Raises:
        ConfigurationError: if the value names no member of `enum_cls`
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid {what}: {value!r}")
    if isinstance(value, int):
        try:
            return enum_cls(value)
        except ValueError:
            raise ConfigurationError(f"Invalid {what}: {value!r}") from None
    if isinstance(value, str):
        member = enum_cls.__members__.get(value.upper())
        if member is not None:
            return member
    raise ConfigurationError(f"Invalid {what}: {value!r}")


def channel_type(value: Union[ChannelType, int, str]) -> int:
    """Convert a channel kind to its platform integer code.

    Unknown non-negative integers pass through unchanged so channel kinds
    added to the platform later can still be declared.

        >>> channel_type('guild_text')
        0
        >>> channel_type(5)
        5
    """
    if isinstance(value, int) and not isinstance(value, (bool, ChannelType)) and value >= 0:
        return value
    return int(coerce_enum(ChannelType, value, 'channel type'))
