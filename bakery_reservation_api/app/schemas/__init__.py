"""
Pydantic schema definitions for API payloads and query rows.
"""
