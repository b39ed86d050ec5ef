"""
Email composition for equipment inquiries.

This module builds the subject line, the fixed-format plain-text body and
the outbound message envelope from a validated submission.
"""

from typing import List

from domain.models import EmailAttachment, EmailMessage, HandlerConfig, InquirySubmission

NO_FILE_STATUS = '(none provided)'
NO_NOTES = '(none)'
SEPARATOR = '-' * 40


def build_subject(submission: InquirySubmission) -> str:
    """
    Example:
        >>> build_subject(submission)
        'New Equipment Inquiry: Acme Corp (Austin, TX)'
    """
    return f"New Equipment Inquiry: {submission.company_name} ({submission.pickup_city_state})"


def format_file_status(submission: InquirySubmission) -> str:
    """
    Describe the uploaded inventory file for the email body.

    Returns:
        "{filename} ({size} KB)" with size rounded to whole KB, or
        "(none provided)" when no non-empty file was uploaded
    """
    if not submission.has_inventory_file:
        return NO_FILE_STATUS

    uploaded = submission.inventory_file
    # Halves round up
    size_kb = (uploaded.size_bytes + 512) // 1024
    return f"{uploaded.name} ({size_kb} KB)"


def build_text_body(submission: InquirySubmission, from_name: str) -> str:
    """Render the plain-text body sent to the operator inbox."""
    lines = [
        "New equipment inquiry received from wipe-recycle.com",
        "",
        SEPARATOR,
        f"Company Name:       {submission.company_name}",
        f"Contact Name:       {submission.contact_name}",
        f"Pickup Location:    {submission.pickup_city_state}",
        f"Email:              {submission.email}",
        f"Phone:              {submission.phone}",
        f"Inventory Upload:   {format_file_status(submission)}",
        "",
        "Notes:",
        submission.notes or NO_NOTES,
        SEPARATOR,
        "",
        "Reply directly to this email to contact the requester.",
        "",
        f"- {from_name}",
    ]
    return "\n".join(lines) + "\n"


def build_message(
    submission: InquirySubmission,
    config: HandlerConfig,
    attachments: List[EmailAttachment]
) -> EmailMessage:
    """
    Build the outbound envelope.

    Replies go to the submitter; the operator addresses come from config.
    """
    return EmailMessage(
        to_address=config.to_email,
        from_address=config.from_email,
        from_name=config.from_name,
        reply_to_address=submission.email,
        reply_to_name=submission.contact_name,
        subject=build_subject(submission),
        body=build_text_body(submission, config.from_name),
        attachments=list(attachments)
    )
