"""clew - declarative Claude Code configuration."""

__version__ = "0.4.0"
