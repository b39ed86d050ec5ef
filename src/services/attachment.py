"""
Inventory file attachment service.

This module enforces the upload size limit and turns an uploaded file into
the base64 attachment descriptor expected by the delivery gateway.
"""

import base64
import logging
from typing import Optional

from domain.errors import ClientInputError
from domain.models import EmailAttachment, UploadedFile, DEFAULT_MAX_ATTACHMENT_BYTES

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = 'application/octet-stream'

# 32 KiB rounded down to a whole number of 3-byte groups, so each chunk
# encodes without padding and the pieces concatenate into one valid string
CHUNK_SIZE = (32 * 1024 // 3) * 3


def encode_base64_chunked(content: bytes, chunk_size: int = CHUNK_SIZE) -> str:
    """
    Base64-encode a byte buffer in bounded-size chunks.

    Args:
        content: Bytes to encode
        chunk_size: Bytes per chunk, must be a positive multiple of 3

    Returns:
        str: Base64 text identical to encoding the buffer in one call

    Raises:
        ValueError: If chunk_size is not a positive multiple of 3
    """
    if chunk_size <= 0 or chunk_size % 3:
        raise ValueError(f"chunk_size must be a positive multiple of 3, got {chunk_size}")

    view = memoryview(content)
    return ''.join(
        base64.b64encode(view[i:i + chunk_size]).decode('ascii')
        for i in range(0, len(view), chunk_size)
    )


def check_size(
    uploaded: UploadedFile,
    fallback_email: str,
    max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES
) -> None:
    """
    Reject files over the size limit.

    Raises:
        ClientInputError: 413 asking the user to email the file directly
    """
    if uploaded.size_bytes > max_bytes:
        logger.warning(
            f"Attachment too large, rejecting: {uploaded.name} "
            f"({uploaded.size_bytes:,} bytes > {max_bytes:,} limit)"
        )
        raise ClientInputError(
            f"File too large (max {max_bytes // (1024 * 1024)}MB). "
            f"Please email it directly to {fallback_email} instead.",
            status_code=413
        )


def build_attachment(
    uploaded: Optional[UploadedFile],
    fallback_email: str,
    max_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES
) -> Optional[EmailAttachment]:
    """
    Build the attachment descriptor for an uploaded inventory file.

    Args:
        uploaded: File from the form, or None
        fallback_email: Address quoted in the oversize message
        max_bytes: Size limit in bytes (inclusive)

    Returns:
        EmailAttachment, or None when no file or an empty file was uploaded

    Raises:
        ClientInputError: If the file exceeds max_bytes
    """
    if uploaded is None or uploaded.size_bytes <= 0:
        return None

    check_size(uploaded, fallback_email, max_bytes)

    content = uploaded.read_all_bytes()
    attachment = EmailAttachment(
        content=encode_base64_chunked(content),
        filename=uploaded.name,
        content_type=uploaded.mime_type or DEFAULT_CONTENT_TYPE
    )

    logger.info(
        f"Encoded attachment: {uploaded.name} ({attachment.content_type}), "
        f"{len(content):,} bytes -> {len(attachment.content):,} base64 chars"
    )
    return attachment
