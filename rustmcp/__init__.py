"""rustmcp - Rust code analysis over an MCP-style JSON protocol."""

__version__ = "1.0.0"
__logo__ = "🦀"
