# tests/__init__.py
"""
Test suite for Copilot Relay.

- unit: Unit tests for individual components
- integration: HTTP app wired to the real token provider and cache store
"""
