"""Configuration module for rustmcp."""

from rustmcp.config.loader import get_config_path, load_config
from rustmcp.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
