"""Pydantic schemas for session records, events and operation results."""
