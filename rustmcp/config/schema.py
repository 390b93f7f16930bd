"""Configuration schema using Pydantic.

The single data model and defaults for the server, persisted to ~/.rustmcp/config.json.
"""

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from rustmcp import __version__


class BridgeConfig(BaseModel):
    """External analyzer process settings."""
    binary_path: str = ""  # Empty means "look at RUST_BINARY_PATH"
    timeout_seconds: float = Field(default=10.0, gt=0)
    capability: str = "Rust analysis"  # Used in degraded-outcome messages


class StdioConfig(BaseModel):
    """Newline-delimited stdin/stdout transport."""
    enabled: bool = False
    max_line_bytes: int = Field(default=4 * 1024 * 1024, ge=1024)


class WebSocketConfig(BaseModel):
    """WebSocket transport served by uvicorn."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = Field(default=3000, ge=0, le=65535)
    path: str = "/"


class HistoryConfig(BaseModel):
    """In-memory analysis history."""
    max_entries: int = Field(default=100, ge=1)


class LoggingConfig(BaseModel):
    """Loguru sinks."""
    level: str = "INFO"
    file_enabled: bool = False
    log_dir: str = "~/.rustmcp/logs"

    @property
    def log_path(self) -> Path:
        return Path(self.log_dir).expanduser()


class ServerInfoConfig(BaseModel):
    """Identity reported by ``initialize``."""
    name: str = "rust-mcp-server"
    version: str = __version__
    protocol_version: str = "0.1.0"


class Config(BaseSettings):
    """Root configuration for rustmcp."""
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)
    stdio: StdioConfig = Field(default_factory=StdioConfig)
    websocket: WebSocketConfig = Field(default_factory=WebSocketConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerInfoConfig = Field(default_factory=ServerInfoConfig)

    model_config = SettingsConfigDict(
        env_prefix="RUSTMCP_",
        env_nested_delimiter="__",
    )
