"""Configuration management for the relay service."""

from copilot_relay.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
