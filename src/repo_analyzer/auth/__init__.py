"""GitHub login flow and browser sessions.

This package provides:
- CSRF state generation, storage and validation
- Authorization URL construction
- Session cookies for GitHub and admin logins
- FastAPI dependencies guarding session-only routes
"""
