"""Persistence adapters (SQLAlchemy and in-memory)."""
