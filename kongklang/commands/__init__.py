"""Chat command grammar."""

from kongklang.commands.parser import CommandParser

__all__ = ["CommandParser"]
