"""Shared infrastructure: logging, errors, hashing and caches."""
