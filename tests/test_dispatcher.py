"""Tests for interaction dispatch."""
import logging

import pytest

from interaction_gateway import dispatcher
from interaction_gateway.dispatcher import (
    ERROR,
    OK,
    ROUTES,
    Acknowledged,
    DispatchFailure,
    Failed,
    Responded,
    dispatch,
    normalize_result,
)
from interaction_gateway.enums import InteractionType
from interaction_gateway.registry import (
    CommandDeclaration,
    ComponentHandlerDeclaration,
    ModalHandlerDeclaration,
    Registry,
    build_registry,
)


class Recorder:
    """Handler recording the interactions it receives."""

    def __init__(self, result=None):
        self.result = result
        self.calls = []

    def __call__(self, interaction):
        self.calls.append(interaction)
        return self.result


def command(name, guild_id=None, interaction_type=2):
    interaction = {'type': interaction_type, 'data': {'name': name}}
    if guild_id is not None:
        interaction['guild_id'] = guild_id
    return interaction


@pytest.fixture
def global_ping():
    return Recorder({'type': 4, 'data': {'content': 'global'}})


@pytest.fixture
def guild_ping():
    return Recorder({'type': 4, 'data': {'content': 'guild'}})


@pytest.fixture
def registry(global_ping, guild_ping) -> Registry:
    return build_registry([
        CommandDeclaration('ping', global_ping, description='Global ping'),
        CommandDeclaration('ping', guild_ping, description='Guild ping', guilds=['G1']),
    ])


class TestPing:

    def test_pong_with_empty_registry(self):
        assert dispatch({'type': 1}, Registry()) == Responded({'type': 1})

    def test_ping_never_reaches_handlers(self, registry, global_ping, guild_ping):
        component = Recorder()
        registry = build_registry([
            CommandDeclaration('ping', global_ping, description='Ping'),
            ComponentHandlerDeclaration(component),
        ])

        assert dispatch({'type': 1, 'data': {'name': 'ping'}}, registry) == Responded({'type': 1})
        assert global_ping.calls == []
        assert component.calls == []


class TestApplicationCommand:

    def test_guild_command_takes_priority(self, registry, global_ping, guild_ping):
        outcome = dispatch(command('ping', 'G1'), registry)

        assert outcome == Responded({'type': 4, 'data': {'content': 'guild'}})
        assert len(guild_ping.calls) == 1
        assert global_ping.calls == []

    @pytest.mark.parametrize("guild_id", ['G2', None])
    def test_global_fallback(self, registry, global_ping, guild_ping, guild_id):
        outcome = dispatch(command('ping', guild_id), registry)

        assert outcome == Responded({'type': 4, 'data': {'content': 'global'}})
        assert guild_ping.calls == []

    def test_handler_receives_full_interaction(self, registry, global_ping):
        interaction = command('ping')
        interaction['member'] = {'user': {'id': '1'}}

        dispatch(interaction, registry)

        assert global_ping.calls == [interaction]

    def test_unknown_command(self, registry):
        outcome = dispatch(command('missing'), registry)

        assert outcome == Failed(DispatchFailure.UNKNOWN_COMMAND, detail='missing')

    def test_guild_only_command_unknown_elsewhere(self):
        registry = build_registry([
            CommandDeclaration('secret', Recorder(), description='Secret', guilds=['G1'])
        ])

        assert dispatch(command('secret', 'G2'), registry).reason is DispatchFailure.UNKNOWN_COMMAND
        assert dispatch(command('secret'), registry).reason is DispatchFailure.UNKNOWN_COMMAND

    def test_missing_data(self, registry):
        assert dispatch({'type': 2}, registry).reason is DispatchFailure.UNKNOWN_COMMAND


class TestAutocomplete:

    def test_uses_autocomplete_handler(self):
        handler = Recorder({'type': 4})
        suggest = Recorder({'type': 8, 'data': {'choices': []}})
        registry = build_registry([
            CommandDeclaration('color', handler, description='Color', autocomplete_handler=suggest)
        ])

        outcome = dispatch(command('color', interaction_type=4), registry)

        assert outcome == Responded({'type': 8, 'data': {'choices': []}})
        assert handler.calls == []

    def test_guild_autocomplete_takes_priority(self):
        global_suggest = Recorder({'type': 8, 'data': {'choices': [{'name': 'g', 'value': 'g'}]}})
        guild_suggest = Recorder({'type': 8, 'data': {'choices': []}})
        registry = build_registry([
            CommandDeclaration('color', Recorder(), description='Color', autocomplete_handler=global_suggest),
            CommandDeclaration('color', Recorder(), description='Color', guilds=['G1'],
                               autocomplete_handler=guild_suggest),
        ])

        dispatch(command('color', 'G1', interaction_type=4), registry)

        assert len(guild_suggest.calls) == 1
        assert global_suggest.calls == []

    def test_no_autocomplete_handler(self, registry):
        outcome = dispatch(command('ping', interaction_type=4), registry)

        assert outcome == Failed(DispatchFailure.NO_AUTOCOMPLETE_HANDLER, detail='ping')

    def test_unknown_command(self, registry):
        outcome = dispatch(command('missing', interaction_type=4), registry)

        assert outcome.reason is DispatchFailure.UNKNOWN_COMMAND


class TestComponentAndModal:

    def test_component_handler(self):
        handler = Recorder({'type': 7, 'data': {}})
        registry = build_registry([ComponentHandlerDeclaration(handler)])
        interaction = {'type': 3, 'data': {'custom_id': 'button'}}

        assert dispatch(interaction, registry) == Responded({'type': 7, 'data': {}})
        assert handler.calls == [interaction]

    def test_no_component_handler(self, registry):
        outcome = dispatch({'type': 3, 'data': {'custom_id': 'button'}}, registry)

        assert outcome == Failed(DispatchFailure.NO_COMPONENT_HANDLER)

    def test_modal_handler(self):
        handler = Recorder({'type': 4, 'data': {'content': 'thanks'}})
        registry = build_registry([ModalHandlerDeclaration(handler)])

        outcome = dispatch({'type': 5, 'data': {'custom_id': 'form'}}, registry)

        assert outcome == Responded({'type': 4, 'data': {'content': 'thanks'}})

    def test_no_modal_handler(self, registry):
        outcome = dispatch({'type': 5, 'data': {'custom_id': 'form'}}, registry)

        assert outcome == Failed(DispatchFailure.NO_MODAL_HANDLER)


class TestUnknownInteractionType:

    @pytest.mark.parametrize("interaction", [
        {'type': 99},
        {'type': 0},
        {'type': None},
        {'type': '2'},
        {'type': True},
        {},
        [],
        'ping',
    ])
    def test_unknown_type(self, registry, interaction):
        outcome = dispatch(interaction, registry)

        assert outcome.reason is DispatchFailure.UNKNOWN_INTERACTION_TYPE

    def test_every_interaction_type_has_a_route(self):
        assert set(ROUTES) == set(InteractionType)


class TestHandlerResults:

    @pytest.mark.parametrize("result,expected", [
        ({'type': 4}, Responded({'type': 4})),
        ((OK, {'type': 4}), Responded({'type': 4})),
        (None, Acknowledged()),
        (OK, Acknowledged()),
        (ERROR, Failed(DispatchFailure.HANDLER_REPORTED_ERROR)),
        ((ERROR, 'nope'), Failed(DispatchFailure.HANDLER_REPORTED_ERROR, detail='nope')),
    ])
    def test_normalize(self, result, expected):
        assert normalize_result(result) == expected

    @pytest.mark.parametrize("result", [42, 'maybe', ('ok', 'not a dict'), (OK, [{'type': 4}]), ['ok']])
    def test_unrecognized_result(self, result):
        assert normalize_result(result).reason is DispatchFailure.HANDLER_REPORTED_ERROR

    def test_acknowledging_handler(self):
        registry = build_registry([CommandDeclaration('ack', Recorder(OK), description='Ack')])

        assert dispatch(command('ack'), registry) == Acknowledged()

    def test_reported_error(self, caplog):
        registry = build_registry([CommandDeclaration('bad', Recorder(ERROR), description='Bad')])

        with caplog.at_level(logging.ERROR, logger=dispatcher.logger.service_name):
            outcome = dispatch(command('bad'), registry)

        assert outcome == Failed(DispatchFailure.HANDLER_REPORTED_ERROR)
        assert any('reported an error' in record.getMessage() for record in caplog.records)


class TestHandlerCrash:

    @pytest.fixture
    def crashing_registry(self, global_ping):
        def boom(interaction):
            raise RuntimeError('database unavailable')

        return build_registry([
            CommandDeclaration('boom', boom, description='Crashes'),
            CommandDeclaration('ping', global_ping, description='Ping'),
        ])

    def test_crash_is_contained(self, crashing_registry):
        outcome = dispatch(command('boom'), crashing_registry)

        assert outcome == Failed(DispatchFailure.HANDLER_CRASHED, detail='RuntimeError')

    def test_crash_logged_with_traceback(self, crashing_registry, caplog):
        with caplog.at_level(logging.ERROR, logger=dispatcher.logger.service_name):
            dispatch(command('boom'), crashing_registry)

        messages = [record.getMessage() for record in caplog.records]
        assert any('crashed' in message and 'database unavailable' in message for message in messages)
        assert any('Traceback' in message for message in messages)

    def test_later_requests_unaffected(self, crashing_registry):
        dispatch(command('boom'), crashing_registry)

        assert dispatch(command('ping'), crashing_registry) == Responded({'type': 4, 'data': {'content': 'global'}})

    def test_crashing_component_handler(self):
        def boom(interaction):
            raise KeyError('custom_id')

        registry = build_registry([ComponentHandlerDeclaration(boom)])

        assert dispatch({'type': 3, 'data': {}}, registry).reason is DispatchFailure.HANDLER_CRASHED
