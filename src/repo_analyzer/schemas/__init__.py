"""Pydantic schemas for API payloads and GitHub responses."""
