"""Registration of a registry's commands with Discord."""
from typing import Any, Dict, Optional

from .observability import init_observability, traced_function
from .registry import Registry
from .rest import DiscordClient

logger, _ = init_observability('discord-interactions-registration')


@traced_function("register_commands")
def register_commands(registry: Registry, client: DiscordClient,
                      correlation_id: Optional[str] = None) -> Dict[str, Any]:
    """Bulk-overwrite global and per-guild command sets.

    Global commands are registered in a single call; each guild with at
    least one scoped command gets its own call.

    Returns:
        Summary dict with per-scope results and an error count
    """
    global_commands = registry.global_definitions()
    global_result = None
    if global_commands:
        logger.info(
            f"Registering {len(global_commands)} global commands",
            correlation_id=correlation_id,
            total_commands=len(global_commands)
        )
        global_result = client.bulk_overwrite_global_commands(global_commands, correlation_id)
        if global_result['status'] == 'success':
            logger.info("Global commands registered successfully", correlation_id=correlation_id)
        else:
            logger.error(
                "Failed to register global commands",
                correlation_id=correlation_id,
                discord_message=global_result.get('message')
            )
    else:
        logger.info("No global commands to register", correlation_id=correlation_id)

    guild_results = {}
    guild_commands = registry.guild_definitions()
    if not guild_commands:
        logger.info("No guild commands to register", correlation_id=correlation_id)
    for guild_id, commands in guild_commands.items():
        result = client.bulk_overwrite_guild_commands(guild_id, commands, correlation_id)
        guild_results[guild_id] = result
        if result['status'] == 'success':
            logger.info(
                f"Registered {len(commands)} commands for guild {guild_id}",
                correlation_id=correlation_id,
                guild_id=guild_id
            )
        else:
            logger.error(
                f"Failed to register commands for guild {guild_id}",
                correlation_id=correlation_id,
                guild_id=guild_id,
                discord_message=result.get('message')
            )

    results = ([global_result] if global_result else []) + list(guild_results.values())
    error_count = sum(1 for result in results if result['status'] != 'success')

    logger.info(
        "Command registration completed",
        correlation_id=correlation_id,
        total=len(results),
        errors=error_count
    )
    return {
        'status': 'completed' if error_count == 0 else 'error',
        'global': global_result,
        'guilds': guild_results,
        'errors': error_count
    }
