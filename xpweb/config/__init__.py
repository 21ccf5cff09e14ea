"""Client configuration."""

from .settings import ClientSettings, configure_logging, get_settings

__all__ = ["ClientSettings", "configure_logging", "get_settings"]
