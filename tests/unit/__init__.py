# tests/unit/__init__.py
"""
Unit tests.

MSAL and the Copilot Studio client are always replaced by doubles; nothing
here reaches the network.
"""
