"""
Lambda proxy responses with plain-text bodies.
"""

import logging
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CORS_ORIGIN_HEADERS = {
    'Access-Control-Allow-Origin': '*',
}

PREFLIGHT_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
}

SERVER_ERROR_MESSAGE = 'Server error'


def text_response(
    status_code: int,
    body: str = '',
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    response_headers = {'Content-Type': 'text/plain; charset=utf-8'}
    if headers:
        response_headers.update(headers)

    return {
        'statusCode': status_code,
        'headers': response_headers,
        'body': body
    }


def preflight_response() -> Dict[str, Any]:
    return {
        'statusCode': 204,
        'headers': dict(PREFLIGHT_HEADERS),
        'body': ''
    }


def method_not_allowed_response() -> Dict[str, Any]:
    return text_response(405, 'Method Not Allowed', {'Allow': 'POST, OPTIONS'})


def success_response() -> Dict[str, Any]:
    return text_response(200, 'OK', CORS_ORIGIN_HEADERS)


def error_response(message: str, status_code: int = 400) -> Dict[str, Any]:
    logger.info(f"Error response: {message} (status: {status_code})")
    return text_response(status_code, message)


def server_error_response() -> Dict[str, Any]:
    """Generic 500; details stay in the log."""
    return text_response(500, SERVER_ERROR_MESSAGE)
