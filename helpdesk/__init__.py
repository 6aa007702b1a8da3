"""Helpdesk API: multi-tenant support ticketing service."""
