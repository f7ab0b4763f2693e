"""Tests for response builders and outcome encoding."""
import pytest

from interaction_gateway import responses
from interaction_gateway.dispatcher import Acknowledged, DispatchFailure, Failed, Responded


class TestBuilders:

    def test_pong(self):
        assert responses.pong() == {'type': 1}

    def test_channel_message_omits_unset_fields(self):
        assert responses.channel_message_with_source(content='hi') == {
            'type': 4, 'data': {'content': 'hi'}
        }

    def test_channel_message_extra_fields(self):
        response = responses.channel_message_with_source(
            content='hi', embeds=[{'title': 't'}], allowed_mentions={'parse': []}, tts=None
        )

        assert response['data'] == {
            'content': 'hi', 'embeds': [{'title': 't'}], 'allowed_mentions': {'parse': []}
        }

    def test_deferred_and_update(self):
        assert responses.deferred_channel_message_with_source()['type'] == 5
        assert responses.deferred_update_message() == {'type': 6}
        assert responses.update_message(content='x') == {'type': 7, 'data': {'content': 'x'}}

    def test_autocomplete_result(self):
        result = responses.autocomplete_result([responses.choice('Red', 'red')])

        assert result == {'type': 8, 'data': {'choices': [{'name': 'Red', 'value': 'red'}]}}

    def test_modal(self):
        assert responses.modal('form', 'Title', []) == {
            'type': 9, 'data': {'custom_id': 'form', 'title': 'Title', 'components': []}
        }

    def test_ephemeral_sets_flag_without_mutating(self):
        original = responses.channel_message_with_source(content='secret', flags=4096)

        response = responses.ephemeral(original)

        assert response['data']['flags'] == 4096 | 64
        assert original['data']['flags'] == 4096

    def test_premium_required_and_launch_activity(self):
        assert responses.premium_required() == {'type': 10}
        assert responses.launch_activity() == {'type': 12}

    @pytest.mark.parametrize("setter,flag", [
        (responses.suppress_embeds, 2),
        (responses.ephemeral, 64),
        (responses.suppress_notifications, 4096),
        (responses.use_components_v2, 32768),
    ])
    def test_flag_setters(self, setter, flag):
        assert setter(responses.channel_message_with_source())['data']['flags'] == flag
        assert setter(responses.channel_message_with_source(flags=64))['data']['flags'] == flag | 64

    def test_flags_combine(self):
        response = responses.suppress_notifications(
            responses.ephemeral(responses.channel_message_with_source(content='quiet'))
        )

        assert response['data'] == {'content': 'quiet', 'flags': 4160}

    def test_tts(self):
        original = responses.channel_message_with_source(content='hear me')

        response = responses.tts(original)

        assert response == {'type': 4, 'data': {'content': 'hear me', 'tts': True}}
        assert 'tts' not in original['data']


class TestEncodeOutcome:

    def test_responded(self):
        assert responses.encode_outcome(Responded({'type': 1})) == ({'type': 1}, 200)

    def test_acknowledged(self):
        assert responses.encode_outcome(Acknowledged()) == (None, 202)

    @pytest.mark.parametrize("reason", list(DispatchFailure))
    def test_every_failure_is_500(self, reason):
        body, status = responses.encode_outcome(Failed(reason, detail='internal detail'))

        assert status == 500
        assert 'internal detail' not in str(body)

    def test_rejects_other_values(self):
        with pytest.raises(TypeError):
            responses.encode_outcome({'type': 1})
