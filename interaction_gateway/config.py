"""Application configuration."""
import os


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() == 'true'


class Config:
    """Application configuration.

    Values are read from the environment when the instance is created;
    keyword overrides take precedence (useful for tests and embedding).
    """
    DISCORD_API_BASE_URL = "https://discord.com/api/v10"

    def __init__(self, **overrides):
        self.DISCORD_PUBLIC_KEY = overrides.get(
            'DISCORD_PUBLIC_KEY', os.environ.get('DISCORD_PUBLIC_KEY')
        )
        self.DISCORD_BOT_TOKEN = overrides.get(
            'DISCORD_BOT_TOKEN', os.environ.get('DISCORD_BOT_TOKEN')
        )
        self.DISCORD_APPLICATION_ID = overrides.get(
            'DISCORD_APPLICATION_ID', os.environ.get('DISCORD_APPLICATION_ID')
        )
        self.AUTO_REGISTER_COMMANDS = overrides.get(
            'AUTO_REGISTER_COMMANDS', _env_flag('AUTO_REGISTER_COMMANDS', 'true')
        )
        self.SERVICE_NAME = overrides.get(
            'SERVICE_NAME', os.environ.get('SERVICE_NAME', 'discord-interactions')
        )
        self.ENVIRONMENT = overrides.get(
            'ENVIRONMENT', os.environ.get('ENVIRONMENT', 'production')
        )

    @property
    def registration_configured(self) -> bool:
        """Whether bot token and application id are both set."""
        return bool(self.DISCORD_BOT_TOKEN and self.DISCORD_APPLICATION_ID)
