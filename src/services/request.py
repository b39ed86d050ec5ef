"""
Accessors for API Gateway proxy events.

Both REST API (payload v1) and HTTP API (payload v2) event shapes are
supported.
"""

import base64
from typing import Any, Dict, Optional


def get_header(event: Dict[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Look up a request header, ignoring case.

    Args:
        event: Lambda proxy event
        key: Header name
        default: Value returned when the header is absent

    Returns:
        Header value or default
    """
    wanted = key.lower()
    for name, value in (event.get('headers') or {}).items():
        if name.lower() == wanted:
            return value
    return default


def get_http_method(event: Dict[str, Any]) -> str:
    """Return the upper-cased request method, or empty string if unknown."""
    method = event.get('httpMethod')
    if not method:
        method = event.get('requestContext', {}).get('http', {}).get('method', '')
    return (method or '').upper()


def get_request_id(event: Dict[str, Any], default: str = 'UNKNOWN') -> str:
    return event.get('requestContext', {}).get('requestId', default)


def get_body_bytes(event: Dict[str, Any]) -> bytes:
    """
    Return the raw request body.

    API Gateway base64-encodes binary payloads (multipart uploads included)
    and flags them with isBase64Encoded.

    Raises:
        binascii.Error: If the body is flagged as base64 but is not
    """
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        return base64.b64decode(body, validate=True)
    if isinstance(body, bytes):
        return body
    return body.encode('utf-8')
