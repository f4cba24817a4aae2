"""Configuration management for the knowledge-base matcher."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
