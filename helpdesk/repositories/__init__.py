"""Repositories: database access for each entity."""
