"""CLI module for rustmcp."""
