"""
Amplifier tool module for library filter operations.

This module provides the `library_filters` tool that agents and thin
transport adapters can use to fetch filter values.

Usage in Amplifier behaviors:

```yaml
tools:
  - module: tool-library-filters
    source: media-filters
    config:
      backend: duckdb
      db_path: /var/lib/media-filters/library.duckdb
      log_format: json
```
"""

from .tool import (
    FiltersToolConfig,
    FiltersToolModule,
    ToolResult,
    build_backend,
    create_tool,
    mount,
    parse_name_list,
    parse_tri_state,
)

__all__ = [
    "FiltersToolConfig",
    "FiltersToolModule",
    "ToolResult",
    "build_backend",
    "create_tool",
    "mount",
    "parse_name_list",
    "parse_tri_state",
]
