"""API request/response contracts (pydantic models)."""
