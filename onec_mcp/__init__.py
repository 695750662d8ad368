"""HTTP client, data models, prompts and extension installer for 1C:Enterprise MCP integration."""

__version__ = "0.1.0"