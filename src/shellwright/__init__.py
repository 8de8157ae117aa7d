"""shellwright: shell, file, and interactive process tools over MCP."""

__version__ = "0.1.0"
