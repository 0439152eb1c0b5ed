"""Data models for clew.

This module exports the core data structures used throughout the application.
"""

from clew.models.clewfile import Clewfile, MCPServer, Plugin, Source, SourceConfig
from clew.models.operation import Command, Operation, SyncResult
from clew.models.state import MCPServerState, PluginState, SourceState, State
from clew.models.types import Scope, SourceKind, SourceType, TransportType

__all__ = [
    "Clewfile",
    "Command",
    "MCPServer",
    "MCPServerState",
    "Operation",
    "Plugin",
    "PluginState",
    "Scope",
    "Source",
    "SourceConfig",
    "SourceKind",
    "SourceState",
    "SourceType",
    "State",
    "SyncResult",
    "TransportType",
]
