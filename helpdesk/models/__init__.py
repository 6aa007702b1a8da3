"""Data models: ORM tables and API contracts."""
