"""
Pytest configuration and fixtures for all tests.
"""

import base64
import os
import sys
from unittest.mock import Mock

import pytest

# Add src and hooks to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../hooks'))

# Set up test environment variables before importing any modules
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
os.environ.setdefault('EMAIL_GATEWAY', 'mailchannels')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-west-2')
os.environ.setdefault('AWS_ACCESS_KEY_ID', 'testing')
os.environ.setdefault('AWS_SECRET_ACCESS_KEY', 'testing')

BOUNDARY = '----WebKitFormBoundary7MA4YWxkTrZu0gW'

VALID_FIELDS = {
    'companyName': 'Acme Corp',
    'contactName': 'Jane Doe',
    'pickupCityState': 'Austin, TX',
    'email': 'jane@acme.com',
    'phone': '555-1234',
    'notes': '',
}


def build_multipart_body(fields, files=None, boundary=BOUNDARY):
    """
    Encode text fields and files as a multipart/form-data body.

    Args:
        fields: {name: value}
        files: {name: (filename, content_type or None, content bytes)}

    Returns:
        bytes: Request body
    """
    chunks = []
    for name, value in fields.items():
        chunks.append(f'--{boundary}\r\n'.encode())
        chunks.append(f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode())
        chunks.append(value.encode('utf-8'))
        chunks.append(b'\r\n')

    for name, (filename, content_type, content) in (files or {}).items():
        chunks.append(f'--{boundary}\r\n'.encode())
        chunks.append(
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'.encode()
        )
        if content_type:
            chunks.append(f'Content-Type: {content_type}\r\n'.encode())
        chunks.append(b'\r\n')
        chunks.append(content)
        chunks.append(b'\r\n')

    chunks.append(f'--{boundary}--\r\n'.encode())
    return b''.join(chunks)


def build_event(fields=None, files=None, method='POST', base64_encoded=True, content_type=None, body=None):
    """Build an API Gateway (REST) proxy event carrying a multipart form."""
    if body is None:
        body = build_multipart_body(VALID_FIELDS if fields is None else fields, files)
    if isinstance(body, bytes):
        body = base64.b64encode(body).decode('ascii') if base64_encoded else body.decode('utf-8')

    return {
        'httpMethod': method,
        'headers': {
            'content-type': content_type or f'multipart/form-data; boundary={BOUNDARY}',
            'origin': 'https://wipe-recycle.com',
        },
        'requestContext': {'requestId': 'test-request-id'},
        'isBase64Encoded': base64_encoded,
        'body': body,
    }


@pytest.fixture
def valid_fields():
    return dict(VALID_FIELDS)


@pytest.fixture
def mock_context():
    """Mock Lambda context."""
    context = Mock()
    context.aws_request_id = "test-request-id"
    context.invoked_function_arn = "arn:aws:lambda:us-west-2:123456789012:function:test"
    context.function_name = "inquiry-handler-test"
    return context
