"""
Data models for the inquiry domain.

These type-safe data structures define clear contracts between the handler,
the services and the delivery gateways. All of them live for a single
request only.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

DEFAULT_OPERATOR_EMAIL = 'sales@wipe-recycle.com'
DEFAULT_FROM_NAME = 'Wipe & Recycle IT'
DEFAULT_MAX_ATTACHMENT_BYTES = 8 * 1024 * 1024


@dataclass(frozen=True)
class HandlerConfig:
    """
    Settings injected into the inquiry processor.

    Attributes:
        to_email: Destination address for inquiries
        from_email: Sender address used for the outbound message
        from_name: Sender display name
        max_attachment_bytes: Largest inventory file accepted, in bytes
    """
    to_email: str = DEFAULT_OPERATOR_EMAIL
    from_email: str = DEFAULT_OPERATOR_EMAIL
    from_name: str = DEFAULT_FROM_NAME
    max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES

    @classmethod
    def from_environ(cls, environ: Optional[Dict[str, str]] = None) -> 'HandlerConfig':
        """
        Build config from environment variables.

        Empty values fall back to the defaults, same as unset ones.
        """
        env = os.environ if environ is None else environ
        return cls(
            to_email=env.get('TO_EMAIL') or DEFAULT_OPERATOR_EMAIL,
            from_email=env.get('FROM_EMAIL') or DEFAULT_OPERATOR_EMAIL,
            from_name=env.get('FROM_NAME') or DEFAULT_FROM_NAME,
        )


@dataclass
class UploadedFile:
    """
    File part received in the submitted form.

    Attributes:
        name: Original filename from the form part
        mime_type: MIME type declared by the browser (may be empty)
        size_bytes: Size in bytes
        reader: Callable returning the full byte content
    """
    name: str
    mime_type: str
    size_bytes: int
    reader: Callable[[], bytes] = field(repr=False)

    @classmethod
    def from_bytes(cls, name: str, mime_type: str, content: bytes) -> 'UploadedFile':
        """Wrap an in-memory byte buffer."""
        return cls(
            name=name,
            mime_type=mime_type,
            size_bytes=len(content),
            reader=lambda: content
        )

    def read_all_bytes(self) -> bytes:
        return self.reader()


@dataclass
class InquirySubmission:
    """
    Equipment pickup inquiry extracted from the form.

    Text fields are already trimmed; absent fields are empty strings.
    """
    company_name: str
    contact_name: str
    pickup_city_state: str
    email: str
    phone: str
    notes: str = ''
    inventory_file: Optional[UploadedFile] = None

    @property
    def required_fields(self) -> List[str]:
        return [
            self.company_name,
            self.contact_name,
            self.pickup_city_state,
            self.email,
            self.phone,
        ]

    @property
    def has_inventory_file(self) -> bool:
        """Check if a non-empty file was uploaded."""
        return self.inventory_file is not None and self.inventory_file.size_bytes > 0


@dataclass
class EmailAttachment:
    """
    Attachment descriptor in the gateway's JSON shape.

    Attributes:
        content: Base64-encoded file content
        filename: Original filename
        content_type: MIME type (defaults to application/octet-stream)
        disposition: Always "attachment"
    """
    content: str
    filename: str
    content_type: str = 'application/octet-stream'
    disposition: str = 'attachment'

    def to_dict(self) -> Dict[str, str]:
        return {
            'content': self.content,
            'filename': self.filename,
            'type': self.content_type,
            'disposition': self.disposition,
        }


@dataclass
class EmailMessage:
    """
    Outbound email derived from a valid InquirySubmission.

    Attributes:
        to_address: Operator inbox receiving the inquiry
        from_address: Sender address
        from_name: Sender display name
        reply_to_address: Submitter's email
        reply_to_name: Submitter's contact name
        subject: Subject line
        body: Plain-text body
        attachments: Zero or one EmailAttachment
    """
    to_address: str
    from_address: str
    from_name: str
    reply_to_address: str
    reply_to_name: str
    subject: str
    body: str
    attachments: List[EmailAttachment] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """
        Render the transactional email API JSON body.

        Returns:
            Dict with personalizations, from, reply_to, subject, content
            and attachments
        """
        return {
            'personalizations': [{'to': [{'email': self.to_address}]}],
            'from': {'email': self.from_address, 'name': self.from_name},
            'reply_to': {'email': self.reply_to_address, 'name': self.reply_to_name},
            'subject': self.subject,
            'content': [{'type': 'text/plain', 'value': self.body}],
            'attachments': [a.to_dict() for a in self.attachments],
        }


@dataclass
class DeliveryResult:
    """
    Outcome of a single gateway call.

    Attributes:
        success: Whether the gateway accepted the message
        status_code: Status reported by the gateway
        response_text: Raw response text (error description on failure)
    """
    success: bool
    status_code: int
    response_text: str = ''

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"DeliveryResult(success=True, status_code={self.status_code})"
        return (
            f"DeliveryResult(success=False, status_code={self.status_code}, "
            f"response={self.response_text[:200]})"
        )
