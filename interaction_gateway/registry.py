"""Declarative command registry.

Applications describe their commands as plain declaration records, usually
through the `Interactions` decorator builder, and fold them into an
immutable `Registry` once at startup:

    interactions = Interactions()

    @interactions.command("hello", description="Greets you")
    def hello(interaction):
        return responses.channel_message_with_source(content="Hello!")

    registry = interactions.build()

Folding rules:
    - a command with no guild ids goes to `global_commands[name]`
    - otherwise it goes to `guild_commands[(guild_id, name)]` for every id
    - a later declaration for the same key overwrites the earlier one
    - the component and modal handler slots are last-write-wins too

All option types and channel kinds are validated while building, so a
typo fails at startup instead of at request time.
"""
import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .enums import CommandType, OptionType, channel_type, coerce_enum
from .errors import ConfigurationError

Handler = Callable[[dict], Any]

NUMERIC_OPTION_TYPES = frozenset({OptionType.INTEGER, OptionType.NUMBER})
NESTING_OPTION_TYPES = frozenset({OptionType.SUB_COMMAND, OptionType.SUB_COMMAND_GROUP})


# - Declarations (application-authored, unvalidated) -

@dataclass(frozen=True)
class Option:
    """Declaration of a command option.

    `type` and `channel_types` accept enum members, wire integers or
    symbolic names ("string", "guild_text"). `choices` accepts
    `(name, value)` pairs or `{"name": ..., "value": ...}` dicts.
    """
    name: str
    type: Union[OptionType, int, str]
    description: Optional[str] = None
    required: bool = False
    choices: Optional[Sequence[Any]] = None
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    autocomplete: bool = False
    channel_types: Optional[Sequence[Union[int, str]]] = None
    options: Optional[Sequence['Option']] = None


@dataclass(frozen=True)
class CommandDeclaration:
    """Declaration of one application command and its handlers."""
    name: str
    handler: Handler
    kind: Union[CommandType, int, str] = CommandType.CHAT_INPUT
    description: Optional[str] = None
    options: Sequence[Option] = ()
    properties: Mapping[str, Any] = field(default_factory=dict)
    guilds: Sequence[str] = ()
    autocomplete_handler: Optional[Handler] = None


@dataclass(frozen=True)
class ComponentHandlerDeclaration:
    """Declaration of the handler for all message component interactions."""
    handler: Handler


@dataclass(frozen=True)
class ModalHandlerDeclaration:
    """Declaration of the handler for all modal submissions."""
    handler: Handler


Declaration = Union[CommandDeclaration, ComponentHandlerDeclaration, ModalHandlerDeclaration]


# - Validated definitions -

@dataclass(frozen=True)
class Choice:
    name: str
    value: Union[str, int, float]

    def to_payload(self) -> dict:
        return {'name': self.name, 'value': self.value}


@dataclass(frozen=True)
class OptionDefinition:
    """Validated command option."""
    name: str
    type: OptionType
    description: str
    required: bool = False
    choices: Optional[Tuple[Choice, ...]] = None
    min_value: Optional[Union[int, float]] = None
    max_value: Optional[Union[int, float]] = None
    autocomplete: bool = False
    channel_types: Optional[Tuple[int, ...]] = None
    options: Tuple['OptionDefinition', ...] = ()

    def to_payload(self) -> dict:
        """Wire representation for the command registration API."""
        payload = {
            'name': self.name,
            'type': int(self.type),
            'description': self.description,
        }
        if self.required:
            payload['required'] = True
        if self.choices is not None:
            payload['choices'] = [choice.to_payload() for choice in self.choices]
        if self.min_value is not None:
            payload['min_value'] = self.min_value
        if self.max_value is not None:
            payload['max_value'] = self.max_value
        if self.autocomplete:
            payload['autocomplete'] = True
        if self.channel_types is not None:
            payload['channel_types'] = list(self.channel_types)
        if self.options:
            payload['options'] = [option.to_payload() for option in self.options]
        return payload


@dataclass(frozen=True)
class CommandDefinition:
    """Validated application command, as sent to Discord."""
    name: str
    kind: CommandType
    description: Optional[str] = None
    options: Tuple[OptionDefinition, ...] = ()
    properties: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def to_payload(self) -> dict:
        """Wire representation; the `properties` overlay is merged last."""
        payload = {'name': self.name, 'type': int(self.kind)}
        if self.description is not None:
            payload['description'] = self.description
        if self.options:
            payload['options'] = [option.to_payload() for option in self.options]
        payload.update(self.properties)
        return payload


@dataclass(frozen=True)
class CommandEntry:
    """A command definition bound to its handlers and guild scope."""
    definition: CommandDefinition
    handler: Handler
    autocomplete_handler: Optional[Handler] = None
    guild_ids: frozenset = frozenset()

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def is_global(self) -> bool:
        return not self.guild_ids


@dataclass(frozen=True)
class Registry:
    """Immutable lookup structure consulted by the dispatcher.

    Safe for unsynchronized concurrent reads; build it once and share it.
    """
    global_commands: Mapping[str, CommandEntry] = field(default_factory=lambda: MappingProxyType({}))
    guild_commands: Mapping[Tuple[str, str], CommandEntry] = field(default_factory=lambda: MappingProxyType({}))
    component_handler: Optional[Handler] = None
    modal_handler: Optional[Handler] = None

    def lookup(self, name: str, guild_id: Optional[str] = None) -> Optional[CommandEntry]:
        """Find the entry for a command, preferring a guild-scoped one."""
        if guild_id is not None:
            entry = self.guild_commands.get((str(guild_id), name))
            if entry is not None:
                return entry
        return self.global_commands.get(name)

    def global_definitions(self) -> List[dict]:
        """Payloads for the global bulk-overwrite endpoint."""
        return [entry.definition.to_payload() for entry in self.global_commands.values()]

    def guild_definitions(self) -> Dict[str, List[dict]]:
        """Payloads for the per-guild bulk-overwrite endpoint, by guild id."""
        by_guild = {}
        for (guild_id, _name), entry in self.guild_commands.items():
            by_guild.setdefault(guild_id, []).append(entry.definition.to_payload())
        return by_guild


# - Validation -

def _check_handler(handler, what: str):
    if not callable(handler):
        raise ConfigurationError(f"{what} must be callable, got {handler!r}")


def _build_choice(raw) -> Choice:
    if isinstance(raw, Choice):
        return raw
    if isinstance(raw, Mapping):
        try:
            return Choice(name=raw['name'], value=raw['value'])
        except KeyError as e:
            raise ConfigurationError(f"Choice {raw!r} is missing {e.args[0]!r}") from None
    if isinstance(raw, (tuple, list)) and len(raw) == 2:
        return Choice(name=raw[0], value=raw[1])
    raise ConfigurationError(f"Invalid choice: {raw!r}")


def build_option(option: Option, command_name: str) -> OptionDefinition:
    """Validate and convert an option declaration.

    Raises:
        ConfigurationError: on unknown types or channel kinds, or on option
            fields that do not apply to the option's type
    """
    where = f"option '{option.name}' of command '{command_name}'"
    option_type = coerce_enum(OptionType, option.type, f"option type for {where}")

    if not option.description:
        raise ConfigurationError(f"Missing description for {where}")
    if option.autocomplete and option.choices:
        raise ConfigurationError(f"autocomplete and choices are mutually exclusive on {where}")
    if (option.min_value is not None or option.max_value is not None) \
            and option_type not in NUMERIC_OPTION_TYPES:
        raise ConfigurationError(f"min_value/max_value only apply to integer or number options ({where})")
    if option.channel_types is not None and option_type is not OptionType.CHANNEL:
        raise ConfigurationError(f"channel_types only apply to channel options ({where})")
    if option.options and option_type not in NESTING_OPTION_TYPES:
        raise ConfigurationError(f"Nested options only apply to sub commands and groups ({where})")

    channel_types = None
    if option.channel_types is not None:
        channel_types = tuple(channel_type(kind) for kind in option.channel_types)

    choices = None
    if option.choices is not None:
        choices = tuple(_build_choice(raw) for raw in option.choices)

    return OptionDefinition(
        name=option.name,
        type=option_type,
        description=option.description,
        required=bool(option.required),
        choices=choices,
        min_value=option.min_value,
        max_value=option.max_value,
        autocomplete=bool(option.autocomplete),
        channel_types=channel_types,
        options=tuple(build_option(sub, command_name) for sub in option.options or ()),
    )


def build_entry(declaration: CommandDeclaration) -> CommandEntry:
    """Validate a command declaration and bind it to its handlers."""
    kind = coerce_enum(CommandType, declaration.kind, f"command type for '{declaration.name}'")
    _check_handler(declaration.handler, f"Handler of command '{declaration.name}'")
    if declaration.autocomplete_handler is not None:
        _check_handler(declaration.autocomplete_handler, f"Autocomplete handler of '{declaration.name}'")

    if kind is CommandType.CHAT_INPUT:
        if not declaration.description:
            raise ConfigurationError(f"Chat input command '{declaration.name}' requires a description")
    else:
        if declaration.options:
            raise ConfigurationError(f"Context menu command '{declaration.name}' cannot have options")
        if declaration.description:
            raise ConfigurationError(f"Context menu command '{declaration.name}' cannot have a description")

    definition = CommandDefinition(
        name=declaration.name,
        kind=kind,
        description=declaration.description if kind is CommandType.CHAT_INPUT else None,
        options=tuple(build_option(option, declaration.name) for option in declaration.options),
        properties=MappingProxyType(dict(declaration.properties)),
    )
    return CommandEntry(
        definition=definition,
        handler=declaration.handler,
        autocomplete_handler=declaration.autocomplete_handler,
        guild_ids=frozenset(str(guild) for guild in declaration.guilds),
    )


def build_registry(declarations: Iterable[Declaration]) -> Registry:
    """Fold declarations into an immutable Registry.

    Pure with respect to its input. Duplicate keys are resolved last-write-wins
    without warning, so the declaration order is the resolution order.

    Raises:
        ConfigurationError: on any invalid declaration
    """
    global_commands = {}
    guild_commands = {}
    component_handler = None
    modal_handler = None

    for declaration in declarations:
        if isinstance(declaration, CommandDeclaration):
            entry = build_entry(declaration)
            if entry.is_global:
                global_commands[entry.name] = entry
            else:
                for guild_id in entry.guild_ids:
                    guild_commands[(guild_id, entry.name)] = entry
        elif isinstance(declaration, ComponentHandlerDeclaration):
            _check_handler(declaration.handler, "Message component handler")
            component_handler = declaration.handler
        elif isinstance(declaration, ModalHandlerDeclaration):
            _check_handler(declaration.handler, "Modal submit handler")
            modal_handler = declaration.handler
        else:
            raise ConfigurationError(f"Unknown declaration: {declaration!r}")

    return Registry(
        global_commands=MappingProxyType(global_commands),
        guild_commands=MappingProxyType(guild_commands),
        component_handler=component_handler,
        modal_handler=modal_handler,
    )


class Interactions:
    """Decorator-based builder collecting declarations for one application.

    The builder only records declarations; nothing is validated or
    registered until `build()` is called.
    """

    def __init__(self):
        self.declarations: List[Declaration] = []

    def command(self, name: str, kind=CommandType.CHAT_INPUT, description: Optional[str] = None,
                options: Sequence[Option] = (), guilds: Sequence[str] = (),
                properties: Optional[Mapping[str, Any]] = None):
        """Decorator to declare an application command handler."""
        def decorator(func):
            self.declarations.append(CommandDeclaration(
                name=name,
                handler=func,
                kind=kind,
                description=description,
                options=tuple(options),
                properties=dict(properties or {}),
                guilds=tuple(guilds),
            ))
            return func
        return decorator

    def autocomplete(self, name: str):
        """Decorator to attach an autocomplete handler to declared command(s).

        Applies to every earlier declaration named `name`, global or guild.
        """
        def decorator(func):
            matched = False
            for index, declaration in enumerate(self.declarations):
                if isinstance(declaration, CommandDeclaration) and declaration.name == name:
                    self.declarations[index] = dataclasses.replace(declaration, autocomplete_handler=func)
                    matched = True
            if not matched:
                raise ConfigurationError(f"Autocomplete handler declared for unknown command '{name}'")
            return func
        return decorator

    def message_component_handler(self, func):
        """Decorator to declare the handler for all component interactions."""
        self.declarations.append(ComponentHandlerDeclaration(func))
        return func

    def modal_submit_handler(self, func):
        """Decorator to declare the handler for all modal submissions."""
        self.declarations.append(ModalHandlerDeclaration(func))
        return func

    def build(self) -> Registry:
        return build_registry(self.declarations)
