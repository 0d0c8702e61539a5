"""Infrastructure concerns."""
