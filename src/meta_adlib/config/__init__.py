"""Configuration for the Meta Ad Library client."""

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
