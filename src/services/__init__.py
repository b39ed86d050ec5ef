"""
Service functions used by the inquiry pipeline.

This package contains reusable functions for request access, form parsing,
attachment encoding, email composition and response building.
"""

__all__ = ['attachment', 'email', 'multipart', 'request', 'responses']
