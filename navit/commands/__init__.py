"""Command interpreter for the ``:`` prompt."""

from .registry import (
    COMMANDS,
    Command,
    CommandContext,
    CommandResult,
    all_commands,
    command_suggestions,
    complete_command_line,
    execute_command,
)

__all__ = [
    "COMMANDS",
    "Command",
    "CommandContext",
    "CommandResult",
    "all_commands",
    "command_suggestions",
    "complete_command_line",
    "execute_command",
]
