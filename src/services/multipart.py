"""
multipart/form-data parsing for Lambda proxy events.

The request body is handed to the standard library MIME parser with the
request's Content-Type header prepended, so boundaries, transfer encodings
and RFC 2231 filenames are handled the same way as for email.
"""

import logging
from dataclasses import dataclass, field
from email import errors as email_errors
from email import policy
from email.message import Message
from email.parser import BytesParser
from email.utils import collapse_rfc2231_value
from typing import Any, Dict, Optional

from domain.models import UploadedFile
from services import request as request_service

logger = logging.getLogger(__name__)

# Defects that mean the body does not match its declared boundary
_FATAL_DEFECTS = (
    email_errors.NoBoundaryInMultipartDefect,
    email_errors.StartBoundaryNotFoundDefect,
    email_errors.CloseBoundaryNotFoundDefect,
)


class MultipartParseError(ValueError):
    """Raised when a request body cannot be read as multipart/form-data."""
    pass


@dataclass
class FormData:
    """
    Parsed form fields.

    Attributes:
        fields: Text fields by name (first occurrence wins)
        files: File fields by name (first occurrence wins)
    """
    fields: Dict[str, str] = field(default_factory=dict)
    files: Dict[str, UploadedFile] = field(default_factory=dict)

    def get_text(self, name: str) -> str:
        """Return a trimmed text field, or empty string if absent."""
        return (self.fields.get(name) or '').strip()

    def get_file(self, name: str) -> Optional[UploadedFile]:
        return self.files.get(name)


def parse_form_data(event: Dict[str, Any]) -> FormData:
    """
    Parse the body of a proxy event as multipart/form-data.

    Args:
        event: Lambda proxy event

    Returns:
        FormData with text fields and uploaded files

    Raises:
        MultipartParseError: If the content type is not multipart/form-data
            or the body is malformed
    """
    content_type = request_service.get_header(event, 'content-type') or ''
    if not content_type.lower().startswith('multipart/form-data'):
        raise MultipartParseError(f"Unsupported content type: {content_type!r}")

    try:
        body = request_service.get_body_bytes(event)
    except ValueError as e:
        raise MultipartParseError(f"Request body is not valid base64: {e}")

    msg = _parse_mime(content_type, body)

    form = FormData()
    for part in msg.iter_parts():
        name = part.get_param('name', header='content-disposition')
        if isinstance(name, tuple):
            name = collapse_rfc2231_value(name)
        if not name:
            logger.warning("Skipping form part without a name")
            continue

        filename = part.get_filename()
        content = part.get_payload(decode=True) or b''

        if filename is not None:
            if name not in form.files:
                # Content-Type is optional on file parts; get_content_type() would report text/plain
                mime_type = part.get_content_type() if part.get('Content-Type') else ''
                form.files[name] = UploadedFile.from_bytes(filename, mime_type, content)
        elif name not in form.fields:
            charset = part.get_content_charset() or 'utf-8'
            form.fields[name] = content.decode(charset, errors='replace')

    logger.info(
        f"Parsed form: fields={sorted(form.fields)}, "
        f"files={[(n, f.size_bytes) for n, f in form.files.items()]}"
    )
    return form


def _parse_mime(content_type: str, body: bytes) -> Message:
    """
    Parse the body as a MIME multipart document.

    Raises:
        MultipartParseError: If the body is not a well-formed multipart document
    """
    header = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n"
    try:
        msg = BytesParser(policy=policy.HTTP).parsebytes(header.encode('latin-1') + body)
    except (UnicodeError, email_errors.MessageError) as e:
        raise MultipartParseError(f"Failed to parse multipart body: {e}")

    fatal = [d for d in msg.defects if isinstance(d, _FATAL_DEFECTS)]
    if fatal or not msg.is_multipart():
        raise MultipartParseError(
            f"Malformed multipart body: {[type(d).__name__ for d in msg.defects]}"
        )

    return msg
