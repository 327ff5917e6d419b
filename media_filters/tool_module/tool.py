"""
Tool module implementation for library filter operations.

This module provides the `library_filters` tool that hosts (agents,
HTTP adapters, CLIs) can register for access to filter values.

Implements the Amplifier Tool protocol:
- name: str property
- description: str property
- async execute(input: dict[str, Any]) -> ToolResult

Request parameters are accepted in the loose shapes HTTP query strings
produce: type lists as lists or comma-delimited strings, tri-state
booleans as bools, "true"/"false" strings, or absent.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from ..backends import LibraryBackend, MemoryBackend, load_snapshot, populate_backend
from ..exceptions import FiltersError, ValidationError
from ..filters import FiltersService
from ..logging_utils import configure_structured_logging

logger = logging.getLogger(__name__)

OPERATIONS = ["get_legacy_filters", "get_filters"]

TRI_STATE_PARAMS = ("is_airing", "is_movie", "is_sports", "is_kids", "is_news", "is_series")


@dataclass
class FiltersToolConfig:
    """Configuration for FiltersToolModule.

    Attributes:
        backend: Which backend to build ("memory" or "duckdb").
        snapshot_path: Optional library snapshot loaded at startup.
        db_path: DuckDB database path (duckdb backend only).
        log_format: "json" routes the package loggers to stdout as JSON
            lines when mounted; "text" leaves logging to the host.
    """

    backend: Literal["memory", "duckdb"] = "memory"
    snapshot_path: Path | None = None
    db_path: str = ":memory:"
    log_format: Literal["text", "json"] = "text"

    @classmethod
    def from_env(cls) -> FiltersToolConfig:
        """Create config from environment variables."""
        snapshot = os.environ.get("MEDIA_FILTERS_SNAPSHOT")
        return cls(
            backend=os.environ.get("MEDIA_FILTERS_BACKEND", "memory"),  # type: ignore[arg-type]
            snapshot_path=Path(snapshot) if snapshot else None,
            db_path=os.environ.get("MEDIA_FILTERS_DUCKDB_PATH", ":memory:"),
            log_format=os.environ.get("MEDIA_FILTERS_LOG_FORMAT", "text"),  # type: ignore[arg-type]
        )


@dataclass
class ToolResult:
    """Result from tool execution, matching Amplifier's ToolResult contract."""

    success: bool
    output: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {"success": self.success}
        if self.success:
            result["output"] = self.output
        if self.error:
            result["error"] = self.error
        return result


# =============================================================================
# Parameter Parsing
# =============================================================================


def parse_name_list(name: str, value: Any) -> tuple[str, ...]:
    """Parse a list parameter given as a list or a comma-delimited string.

    Blank entries are dropped, so "Movie,,Series" and ["Movie", " "]
    behave like ["Movie", "Series"] and ["Movie"].
    """
    if value is None:
        return ()
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = value
    else:
        raise ValidationError(name, "must be a list or a comma-delimited string", repr(value))

    names = []
    for part in parts:
        if not isinstance(part, str):
            raise ValidationError(name, "entries must be strings", repr(part))
        if part.strip():
            names.append(part.strip())
    return tuple(names)


def parse_tri_state(name: str, value: Any) -> bool | None:
    """Parse an optional boolean parameter."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        if lowered == "":
            return None
    raise ValidationError(name, "must be true, false or omitted", repr(value))


def parse_id(name: str, value: Any) -> str | None:
    """Parse an optional id parameter."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(name, "must be a string", repr(value))
    return value.strip() or None


def build_backend(config: FiltersToolConfig) -> LibraryBackend:
    """Create the configured backend and load its snapshot, if any."""
    if config.backend == "memory":
        backend: LibraryBackend = MemoryBackend.create()
    elif config.backend == "duckdb":
        from ..backends.duckdb import DuckDBBackend, DuckDBConfig

        backend = DuckDBBackend.create(DuckDBConfig(db_path=config.db_path))
    else:
        raise ValidationError("backend", "must be 'memory' or 'duckdb'", str(config.backend))

    if config.snapshot_path is not None:
        populate_backend(backend, load_snapshot(config.snapshot_path))

    return backend


# =============================================================================
# Tool Module
# =============================================================================


class FiltersToolModule:
    """
    Tool module exposing library filter operations.

    This class provides the interface expected by Amplifier's tool loading
    system, exposing the filters service as tool functions.
    """

    def __init__(
        self,
        config: FiltersToolConfig | None = None,
        backend: LibraryBackend | None = None,
    ):
        """Initialize the filters tool module.

        Args:
            config: Tool configuration, used when no backend is given.
            backend: Ready backend to serve from (not closed by the tool).
        """
        self.config = config or FiltersToolConfig()
        self._owns_backend = backend is None
        self.backend = backend if backend is not None else build_backend(self.config)
        self.service = FiltersService.from_backend(self.backend)

    def close(self) -> None:
        """Close the backend if this tool created it."""
        if self._owns_backend:
            self.backend.close()

    @property
    def name(self) -> str:
        """Tool name for Amplifier registration."""
        return "library_filters"

    @property
    def description(self) -> str:
        """Tool description for Amplifier."""
        return (
            "Lists the filter values available in a media library scope: "
            "distinct years, genres, tags and official ratings (legacy), or "
            "genre name/id pairs from the genre indexes."
        )

    @property
    def schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's input parameters."""
        type_list = {
            "oneOf": [
                {"type": "array", "items": {"type": "string"}},
                {"type": "string"},
            ],
        }
        tri_state = {"oneOf": [{"type": "boolean"}, {"type": "string", "enum": ["true", "false"]}]}

        properties: dict[str, Any] = {
            "operation": {
                "type": "string",
                "description": "Operation to perform",
                "enum": OPERATIONS,
            },
            # Common parameters
            "user_id": {
                "type": "string",
                "description": "Viewing user id (omit for anonymous)",
            },
            "parent_id": {
                "type": "string",
                "description": "Container to localize the lookup to (omit for the root)",
            },
            "include_item_types": {
                **type_list,
                "description": "Item types, as a list or comma-delimited (e.g. 'Movie,Series')",
            },
            # get_legacy_filters parameters
            "media_types": {
                **type_list,
                "description": "Media types, as a list or comma-delimited",
            },
            # get_filters parameters
            "recursive": {
                **tri_state,
                "description": "Search descendants (default) or direct children only",
            },
        }
        for param in TRI_STATE_PARAMS:
            properties[param] = {**tri_state, "description": f"Optional. Filter on {param}"}

        return {"type": "object", "properties": properties, "required": ["operation"]}

    async def execute(self, input: dict[str, Any]) -> ToolResult:
        """Execute a filters tool operation.

        Implements the Amplifier Tool protocol.

        Args:
            input: Operation parameters from the tool call.

        Returns:
            ToolResult with success status and output/error.
        """
        operation = input.get("operation")

        try:
            if operation == "get_legacy_filters":
                output = self._get_legacy_filters(input)
            elif operation == "get_filters":
                output = self._get_filters(input)
            else:
                return ToolResult(
                    success=False,
                    error=f"Unknown operation: {operation}",
                    output={"available_operations": OPERATIONS},
                )

            return ToolResult(success=True, output=output)

        except FiltersError as e:
            logger.warning("Operation %s failed: %s", operation, e.message)
            return ToolResult(success=False, error=e.message, output={"details": e.details})

    def _get_legacy_filters(self, params: dict[str, Any]) -> dict[str, Any]:
        """Execute get_legacy_filters operation."""
        result = self.service.get_legacy_filters(
            user_id=parse_id("user_id", params.get("user_id")),
            parent_id=parse_id("parent_id", params.get("parent_id")),
            include_item_types=parse_name_list(
                "include_item_types", params.get("include_item_types")
            ),
            media_types=parse_name_list("media_types", params.get("media_types")),
        )

        output = result.to_dict()
        output["operation"] = "get_legacy_filters"
        return output

    def _get_filters(self, params: dict[str, Any]) -> dict[str, Any]:
        """Execute get_filters operation."""
        predicates = {name: parse_tri_state(name, params.get(name)) for name in TRI_STATE_PARAMS}
        result = self.service.get_filters(
            user_id=parse_id("user_id", params.get("user_id")),
            parent_id=parse_id("parent_id", params.get("parent_id")),
            include_item_types=parse_name_list(
                "include_item_types", params.get("include_item_types")
            ),
            recursive=parse_tri_state("recursive", params.get("recursive")),
            **predicates,
        )

        output = result.to_dict()
        output["operation"] = "get_filters"
        return output


def create_tool(**config: Any) -> FiltersToolModule:
    """Factory function for creating the filters tool.

    This function is called by Amplifier's tool loading system.

    Args:
        **config: Tool configuration from the behavior definition.

    Returns:
        Configured FiltersToolModule instance.
    """
    snapshot_path = config.get("snapshot_path")
    return FiltersToolModule(
        FiltersToolConfig(
            backend=config.get("backend", "memory"),
            snapshot_path=Path(snapshot_path) if snapshot_path else None,
            db_path=config.get("db_path", ":memory:"),
            log_format=config.get("log_format", "text"),
        )
    )


def mount(coordinator: Any = None, config: dict[str, Any] | None = None) -> FiltersToolModule:
    """Standard Amplifier module entry point.

    Args:
        coordinator: Amplifier coordinator instance (unused, for protocol compliance).
        config: Tool configuration dictionary. When empty, configuration
            is read from MEDIA_FILTERS_* environment variables. A
            `log_format` of "json" also routes the package loggers to
            stdout as JSON lines.

    Returns:
        Configured FiltersToolModule instance.
    """
    tool = FiltersToolModule(FiltersToolConfig.from_env()) if not config else create_tool(**config)
    if tool.config.log_format == "json":
        configure_structured_logging()
    return tool
