from .base import BaseCommand, CommandResult, GlobalOptions
from .contenttype_field_remove import (
    ContentTypeFieldRemoveCommand,
    ContentTypeFieldRemoveOptions,
)

ALL_COMMANDS = [
    ContentTypeFieldRemoveCommand,
]

__all__ = [
    "BaseCommand",
    "CommandResult",
    "GlobalOptions",
    "ContentTypeFieldRemoveCommand",
    "ContentTypeFieldRemoveOptions",
    "ALL_COMMANDS",
]
