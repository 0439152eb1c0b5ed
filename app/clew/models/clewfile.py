"""Clewfile models for declarative Claude Code configuration.

This module defines the Pydantic models representing the Clewfile
structure that describes the desired sources, plugins and MCP servers.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from clew.models.types import Scope, SourceKind, SourceType, TransportType


class SourceConfig(BaseModel):
    """Location of a source or local plugin.

    Attributes:
        type: How the source is accessed ("github" or "local").
        url: Repository reference for github sources (e.g., "owner/repo").
        path: Filesystem path for local sources (may start with "~").
        ref: Optional git ref (branch, tag or SHA).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Annotated[SourceType, Field(description="Source access type")]
    url: Annotated[str | None, Field(description="Repository URL")] = None
    path: Annotated[str | None, Field(description="Local filesystem path")] = None
    ref: Annotated[str | None, Field(description="Git ref")] = None

    @model_validator(mode="after")
    def validate_location(self) -> SourceConfig:
        """Require the location field matching the source type."""
        if self.type == SourceType.GITHUB and not self.url:
            msg = "github sources require 'url'"
            raise ValueError(msg)
        if self.type == SourceType.LOCAL and not self.path:
            msg = "local sources require 'path'"
            raise ValueError(msg)
        return self


class Source(BaseModel):
    """A named plugin marketplace or repository reference."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Annotated[str, Field(min_length=1, description="Source alias")]
    kind: Annotated[SourceKind, Field(description="What the source provides")] = (
        SourceKind.MARKETPLACE
    )
    source: Annotated[SourceConfig, Field(description="Where the source lives")]

    @property
    def is_local(self) -> bool:
        """Check if the source lives on the local filesystem."""
        return self.source.type == SourceType.LOCAL


class Plugin(BaseModel):
    """A plugin to install.

    Plugins may be declared as a bare string ("name@source") or as a table.
    The shorthand ``{name, source = "local", path}`` declares a local
    plugin and is normalized into a local SourceConfig.

    Attributes:
        name: Plugin identity, "plugin" or "plugin@sourceAlias".
        enabled: Desired enabled state. None means enabled.
        scope: Desired install scope. None leaves the scope unmanaged.
        source: Location of a local plugin, None for marketplace plugins.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: Annotated[str, Field(min_length=1, description="Plugin name")]
    enabled: Annotated[bool | None, Field(description="Desired enabled state")] = None
    scope: Annotated[Scope | None, Field(description="Install scope")] = None
    source: Annotated[SourceConfig | None, Field(description="Local plugin location")] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_shorthand(cls, data: Any) -> Any:
        """Accept bare strings and the local-plugin shorthand."""
        if isinstance(data, str):
            return {"name": data}
        if isinstance(data, dict) and isinstance(data.get("source"), str):
            data = dict(data)
            source_type = data.pop("source")
            data["source"] = {"type": source_type, "path": data.pop("path", None)}
        return data

    @property
    def desired_enabled(self) -> bool:
        """Enabled state to reconcile towards (absent means enabled)."""
        return self.enabled is None or self.enabled

    @property
    def source_alias(self) -> str | None:
        """Source alias encoded in the name, if any."""
        if "@" not in self.name:
            return None
        return self.name.split("@", 1)[1]

    @property
    def is_local(self) -> bool:
        """Check if the plugin is installed from a local checkout."""
        return self.source is not None and self.source.type == SourceType.LOCAL


class MCPServer(BaseModel):
    """An MCP server configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    transport: Annotated[TransportType, Field(description="Transport protocol")]
    command: Annotated[str | None, Field(description="Command for stdio servers")] = None
    args: Annotated[list[str], Field(default_factory=list, description="Command arguments")]
    url: Annotated[str | None, Field(description="URL for http/sse servers")] = None
    env: Annotated[dict[str, str], Field(default_factory=dict, description="Environment")]
    headers: Annotated[dict[str, str], Field(default_factory=dict, description="HTTP headers")]
    scope: Annotated[Scope | None, Field(description="Install scope")] = None

    @model_validator(mode="after")
    def validate_transport_fields(self) -> MCPServer:
        """Require a command for stdio and a URL for HTTP-based transports."""
        if self.transport.is_stdio and not self.command:
            msg = "stdio MCP servers require 'command'"
            raise ValueError(msg)
        if self.transport.is_http_based and not self.url:
            msg = f"{self.transport.value} MCP servers require 'url'"
            raise ValueError(msg)
        return self


class Clewfile(BaseModel):
    """Complete declared configuration.

    Attributes:
        version: Clewfile schema version.
        sources: Plugin marketplaces and repositories.
        plugins: Plugins to install, in declaration order.
        mcp_servers: MCP servers keyed by name.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Annotated[int, Field(ge=1, description="Clewfile schema version")] = 1
    sources: Annotated[list[Source], Field(default_factory=list, description="Sources")]
    plugins: Annotated[list[Plugin], Field(default_factory=list, description="Plugins")]
    mcp_servers: Annotated[
        dict[str, MCPServer],
        Field(default_factory=dict, description="MCP servers by name"),
    ]

    @model_validator(mode="after")
    def validate_references(self) -> Clewfile:
        """Reject duplicate names and plugins that reference unknown sources."""
        source_names = [s.name for s in self.sources]
        duplicates = {n for n in source_names if source_names.count(n) > 1}
        if duplicates:
            msg = f"Duplicate source names: {sorted(duplicates)}"
            raise ValueError(msg)

        plugin_names = [p.name for p in self.plugins]
        duplicates = {n for n in plugin_names if plugin_names.count(n) > 1}
        if duplicates:
            msg = f"Duplicate plugin names: {sorted(duplicates)}"
            raise ValueError(msg)

        known = set(source_names)
        for index, plugin in enumerate(self.plugins):
            alias = plugin.source_alias
            if alias is not None and alias not in known:
                msg = f"plugins[{index}] '{plugin.name}' references unknown source '{alias}'"
                raise ValueError(msg)
        return self

    def get_source(self, name: str) -> Source | None:
        """Find a source by name."""
        for source in self.sources:
            if source.name == name:
                return source
        return None
