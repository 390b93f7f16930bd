"""Utility helpers for rustmcp."""
