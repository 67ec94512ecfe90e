"""Domain models and repositories."""
