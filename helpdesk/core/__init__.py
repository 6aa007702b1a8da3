"""Core infrastructure: configuration-bound database, admission control, pagination."""
