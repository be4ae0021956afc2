"""Pydantic models for response bodies."""
