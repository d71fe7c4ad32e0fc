"""Context-usage status line for Claude Code sessions."""

__version__ = "0.1.0"
