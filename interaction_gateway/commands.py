"""Sample application: commands, autocomplete, component and modal handlers."""
from . import responses
from .registry import Interactions, Option

interactions = Interactions()

COLORS = {
    'Red': '#FF0000',
    'Green': '#00FF00',
    'Blue': '#0000FF',
    'Yellow': '#FFFF00',
    'Cyan': '#00FFFF',
    'Magenta': '#FF00FF',
    'Black': '#000000',
    'White': '#FFFFFF',
    'Gray': '#808080',
    'Orange': '#FFA500',
    'Purple': '#800080',
    'Pink': '#FFC0CB',
    'Gold': '#FFD700',
    'Teal': '#008080',
    'Navy': '#000080',
}
MAX_AUTOCOMPLETE_CHOICES = 25


def _invoking_user(interaction: dict) -> dict:
    # Guild interactions carry member.user, DMs carry user
    member = interaction.get('member') or {}
    return member.get('user') or interaction.get('user') or {}


def _option_value(interaction: dict, name: str, default=None):
    for option in interaction.get('data', {}).get('options', []):
        if option.get('name') == name:
            return option.get('value', default)
    return default


def _color_int(hex_code: str) -> int:
    return int(hex_code.lstrip('#'), 16)


@interactions.command('hello', description='Greets you with a mention')
def hello(interaction):
    """Handle hello command."""
    user_id = _invoking_user(interaction).get('id')
    return responses.channel_message_with_source(
        content=f"Hello, <@{user_id}>!",
        allowed_mentions={'parse': ['users']}
    )


@interactions.command('ping', description='Check that the bot is responding')
def ping(interaction):
    """Handle ping command."""
    return responses.channel_message_with_source(embeds=[{
        'title': 'Pong!',
        'description': 'Bot is up and answering interactions.',
        'color': 0x00FF00
    }])


@interactions.command('modal', description='Shows a modal form for user input')
def show_modal(interaction):
    return responses.modal('user_info_modal', 'User Information', [
        {
            'type': 1,
            'components': [{
                'type': 4,
                'custom_id': 'name',
                'label': 'Your Name',
                'style': 1,
                'required': True
            }]
        },
        {
            'type': 1,
            'components': [{
                'type': 4,
                'custom_id': 'bio',
                'label': 'About You',
                'style': 2,
                'min_length': 10,
                'max_length': 300,
                'required': False
            }]
        }
    ])


@interactions.command('color', description='Shows an embed with the selected color', options=[
    Option('color', 'string', description='Color name or hex code', autocomplete=True, required=True),
])
def color(interaction):
    """Handle color command."""
    value = _option_value(interaction, 'color', '')
    hex_code = COLORS.get(value, value)
    try:
        color_int = _color_int(hex_code)
    except ValueError:
        return responses.ephemeral(responses.channel_message_with_source(
            content=f"`{value}` is neither a known color nor a hex code."
        ))
    return responses.channel_message_with_source(embeds=[{
        'title': f"Color: {value}",
        'description': f"Hex code: `{hex_code}`",
        'color': color_int
    }])


@interactions.autocomplete('color')
def color_autocomplete(interaction):
    """Suggest colors matching what the user typed so far."""
    focused = next(
        (option for option in interaction.get('data', {}).get('options', []) if option.get('focused')),
        {}
    )
    typed = str(focused.get('value') or '').lower()
    suggestions = [
        responses.choice(f"{name} ({hex_code})", name)
        for name, hex_code in COLORS.items()
        if typed in name.lower() or typed in hex_code.lower()
    ]
    return responses.autocomplete_result(suggestions[:MAX_AUTOCOMPLETE_CHOICES])


@interactions.command('components', description='Demonstrates interactive components')
def components(interaction):
    buttons = {
        'type': 1,
        'components': [
            {'type': 2, 'style': 1, 'label': 'Primary', 'custom_id': 'primary_button'},
            {'type': 2, 'style': 4, 'label': 'Danger', 'custom_id': 'danger_button'},
        ]
    }
    select = {
        'type': 1,
        'components': [{
            'type': 3,
            'custom_id': 'color_select',
            'placeholder': 'Select a color',
            'options': [{'label': name, 'value': name} for name in ('Red', 'Green', 'Blue')]
        }]
    }
    return responses.channel_message_with_source(
        content='Here are some interactive components:',
        components=[buttons, select]
    )


@interactions.command('Count Characters', kind='message')
def count_characters(interaction):
    """Count characters, words and lines of the targeted message."""
    data = interaction.get('data', {})
    message = data.get('resolved', {}).get('messages', {}).get(data.get('target_id'), {})
    content = message.get('content') or ''
    return responses.ephemeral(responses.channel_message_with_source(embeds=[{
        'title': 'Message Statistics',
        'color': 0x5865F2,
        'fields': [
            {'name': 'Characters', 'value': str(len(content)), 'inline': True},
            {'name': 'Words', 'value': str(len(content.split())), 'inline': True},
            {'name': 'Lines', 'value': str(len(content.split('\n'))), 'inline': True},
        ]
    }]))


@interactions.message_component_handler
def handle_component(interaction):
    """Handle button clicks and select menus."""
    data = interaction.get('data', {})
    custom_id = data.get('custom_id')
    if custom_id == 'color_select' and data.get('values'):
        name = data['values'][0]
        return responses.update_message(embeds=[{
            'title': f"Selected Color: {name}",
            'color': _color_int(COLORS.get(name, '#000000'))
        }], components=[])
    if custom_id in ('primary_button', 'danger_button'):
        label = custom_id.split('_')[0].capitalize()
        return responses.channel_message_with_source(content=f"You clicked the {label} button!")
    return responses.deferred_update_message()


@interactions.modal_submit_handler
def handle_modal_submit(interaction):
    """Echo back the values submitted through a modal."""
    values = {}
    for row in interaction.get('data', {}).get('components', []):
        for text_input in row.get('components', []):
            values[text_input.get('custom_id')] = text_input.get('value')
    return responses.ephemeral(responses.channel_message_with_source(
        content='Thanks for submitting your information!',
        embeds=[{
            'title': 'User Information',
            'fields': [
                {'name': 'Name', 'value': values.get('name') or 'Not provided', 'inline': True},
                {'name': 'Bio', 'value': values.get('bio') or 'Not provided', 'inline': False},
            ]
        }]
    ))


registry = interactions.build()
