"""Huly MCP Server - tools for Huly project management over MCP.

Modules:
- server: lifecycle, request handlers and entry point
- transports: stdio and HTTP bindings
- tools: tool registry and per-category tool definitions
- error_mapping: failure to tool result mapping
- telemetry: observability sink
- config: environment and config file settings
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
