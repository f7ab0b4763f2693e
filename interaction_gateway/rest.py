"""Discord REST client for application command management."""
from typing import Any, Dict, List, Optional

import requests

from .config import Config
from .errors import MissingCredentialsError
from .observability import init_observability

logger, _ = init_observability('discord-interactions-rest')


class DiscordClient:
    """Client for the application command endpoints of the Discord API.

    Every call returns a result dict instead of raising:
        {'status': 'success', 'data': <decoded JSON or None>}
        {'status': 'error', 'message': 'HTTP 400', 'details': <response text>}
    """

    def __init__(self, bot_token: Optional[str], application_id: Optional[str],
                 base_url: str = Config.DISCORD_API_BASE_URL, timeout: int = 10):
        if not bot_token or not application_id:
            raise MissingCredentialsError(
                'Discord tokens not configured. Set DISCORD_BOT_TOKEN and DISCORD_APPLICATION_ID.'
            )
        self.application_id = application_id
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bot {bot_token}",
            "Content-Type": "application/json"
        }

    @classmethod
    def from_config(cls, config: Config) -> 'DiscordClient':
        return cls(config.DISCORD_BOT_TOKEN, config.DISCORD_APPLICATION_ID,
                   base_url=config.DISCORD_API_BASE_URL)

    def _request(self, method: str, path: str, payload: Any = None,
                 correlation_id: Optional[str] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method, url, headers=self.headers, json=payload, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Discord API request failed: {method} {path}", error=e, correlation_id=correlation_id)
            return {'status': 'error', 'message': str(e)}

        if 200 <= response.status_code < 300:
            data = None
            if response.status_code != 204 and response.content:
                try:
                    data = response.json()
                except ValueError:
                    data = response.text
            return {'status': 'success', 'data': data}

        logger.error(
            f"Discord API returned an error: {method} {path}",
            correlation_id=correlation_id,
            status_code=response.status_code,
            response_text=response.text[:200]
        )
        return {
            'status': 'error',
            'message': f"HTTP {response.status_code}",
            'details': response.text
        }

    def _commands_path(self, guild_id: Optional[str] = None) -> str:
        if guild_id is None:
            return f"/applications/{self.application_id}/commands"
        return f"/applications/{self.application_id}/guilds/{guild_id}/commands"

    # - Global commands -

    def get_global_commands(self) -> Dict[str, Any]:
        return self._request('GET', self._commands_path())

    def get_global_command(self, command_id: str) -> Dict[str, Any]:
        return self._request('GET', f"{self._commands_path()}/{command_id}")

    def create_global_command(self, command: dict) -> Dict[str, Any]:
        return self._request('POST', self._commands_path(), command)

    def edit_global_command(self, command_id: str, command: dict) -> Dict[str, Any]:
        return self._request('PATCH', f"{self._commands_path()}/{command_id}", command)

    def delete_global_command(self, command_id: str) -> Dict[str, Any]:
        return self._request('DELETE', f"{self._commands_path()}/{command_id}")

    def bulk_overwrite_global_commands(self, commands: List[dict],
                                       correlation_id: Optional[str] = None) -> Dict[str, Any]:
        """Replace the whole set of global commands."""
        return self._request('PUT', self._commands_path(), commands, correlation_id)

    # - Guild commands -

    def get_guild_commands(self, guild_id: str) -> Dict[str, Any]:
        return self._request('GET', self._commands_path(guild_id))

    def get_guild_command(self, guild_id: str, command_id: str) -> Dict[str, Any]:
        return self._request('GET', f"{self._commands_path(guild_id)}/{command_id}")

    def create_guild_command(self, guild_id: str, command: dict) -> Dict[str, Any]:
        return self._request('POST', self._commands_path(guild_id), command)

    def edit_guild_command(self, guild_id: str, command_id: str, command: dict) -> Dict[str, Any]:
        return self._request('PATCH', f"{self._commands_path(guild_id)}/{command_id}", command)

    def delete_guild_command(self, guild_id: str, command_id: str) -> Dict[str, Any]:
        return self._request('DELETE', f"{self._commands_path(guild_id)}/{command_id}")

    def bulk_overwrite_guild_commands(self, guild_id: str, commands: List[dict],
                                      correlation_id: Optional[str] = None) -> Dict[str, Any]:
        """Replace the whole set of commands of one guild."""
        return self._request('PUT', self._commands_path(guild_id), commands, correlation_id)
