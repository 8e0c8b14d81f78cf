"""Structured run events and the in-memory event store."""
