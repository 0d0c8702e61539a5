"""Domain models and exceptions."""
