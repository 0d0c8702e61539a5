"""HTTP relay to Copilot Studio agents with persistent MSAL token caching."""

__version__ = "0.1.0"
