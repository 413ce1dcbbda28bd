"""
Demo MCP server - JSON-RPC 2.0 over stdio.

This package answers the MCP handshake and exposes a calculator tool, file
resources under configured roots, and prompt templates. Requests are
validated against each entry's input schema with jsonschema, or with an
embedded structural validator when jsonschema cannot be loaded.
"""

__version__ = "0.1.0"
