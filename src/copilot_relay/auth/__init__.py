"""Service-managed and delegated identity for Copilot Studio calls."""
