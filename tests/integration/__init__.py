# tests/integration/__init__.py
"""
Integration tests for component interactions.

These tests run the FastAPI app with the real token provider and file-backed
token cache. Only the MSAL public client and the agent client are replaced.
"""
