"""
Domain layer for inquiry processing business logic.

This layer contains:
- Data models (type-safe structures)
- Business logic (validation and delivery pipeline)
- Error types (mapped to HTTP status codes)
"""
