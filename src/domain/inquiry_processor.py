"""
Inquiry processing pipeline - core business logic.

This module handles one equipment pickup inquiry end to end:
1. Dispatch on the HTTP method (pre-flight, submission, anything else)
2. Parse the multipart form
3. Validate the required fields and email address
4. Encode the optional inventory file as an attachment
5. Build the email envelope
6. Deliver it through the injected gateway
7. Translate the outcome into an HTTP response

All errors are caught and turned into a response. No exceptions propagate
out of handle().
"""

import logging
import re
import time
from typing import Any, Dict, Protocol

from .errors import ClientInputError, InquiryError, UpstreamDeliveryError
from .models import DeliveryResult, EmailMessage, HandlerConfig, InquirySubmission
from services import attachment as attachment_service
from services import email as email_service
from services import multipart as multipart_service
from services import request as request_service
from services import responses

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

INVENTORY_FILE_FIELD = 'inventoryFile'


class EmailGateway(Protocol):
    """Anything that can deliver an EmailMessage in one synchronous call."""

    def send(self, message: EmailMessage) -> DeliveryResult:
        ...


def is_valid_email(email: str) -> bool:
    """Check for a basic local@domain.tld shape with no whitespace."""
    return EMAIL_PATTERN.match(email) is not None


def extract_submission(form: multipart_service.FormData) -> InquirySubmission:
    """Pull the inquiry fields out of the parsed form, trimming text values."""
    return InquirySubmission(
        company_name=form.get_text('companyName'),
        contact_name=form.get_text('contactName'),
        pickup_city_state=form.get_text('pickupCityState'),
        email=form.get_text('email'),
        phone=form.get_text('phone'),
        notes=form.get_text('notes'),
        inventory_file=form.get_file(INVENTORY_FILE_FIELD)
    )


def validate_submission(submission: InquirySubmission) -> None:
    """
    Validate required fields, then the email format.

    Raises:
        ClientInputError: "Missing required fields" or "Invalid email address"
    """
    if not all(submission.required_fields):
        raise ClientInputError("Missing required fields")

    if not is_valid_email(submission.email):
        raise ClientInputError("Invalid email address")


class InquiryProcessor:
    """
    Handles the end-to-end inquiry pipeline for one request at a time.

    Holds only immutable config and the gateway, so a single instance can be
    reused across invocations.
    """

    def __init__(self, config: HandlerConfig, gateway: EmailGateway):
        self.config = config
        self.gateway = gateway

    def handle(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle a single Lambda proxy event.

        Args:
            event: API Gateway proxy event

        Returns:
            Lambda proxy response dict (statusCode, headers, body)
        """
        method = request_service.get_http_method(event)
        request_id = request_service.get_request_id(event)
        logger.info(f"Handling {method or 'UNKNOWN'} request: {request_id}")

        if method == 'OPTIONS':
            return responses.preflight_response()

        if method != 'POST':
            logger.warning(f"Rejecting method: {method}")
            return responses.method_not_allowed_response()

        try:
            self._process_submission(event)
            return responses.success_response()

        except InquiryError as e:
            return responses.error_response(e.message, e.status_code)

        except Exception as e:
            logger.error(f"Failed to process inquiry {request_id}: {e}", exc_info=True)
            return responses.server_error_response()

    def _process_submission(self, event: Dict[str, Any]) -> None:
        """
        Run parse, validate, attach, build and deliver for a POST.

        Raises:
            ClientInputError: Invalid submission or oversized file
            UpstreamDeliveryError: Gateway rejected the message
            multipart_service.MultipartParseError: Body is not a valid form
        """
        form = multipart_service.parse_form_data(event)
        submission = extract_submission(form)

        validate_submission(submission)
        logger.info(
            f"Validated inquiry: company={submission.company_name}, "
            f"location={submission.pickup_city_state}, "
            f"file={submission.has_inventory_file}"
        )

        attachment = attachment_service.build_attachment(
            submission.inventory_file,
            fallback_email=self.config.to_email,
            max_bytes=self.config.max_attachment_bytes
        )
        attachments = [attachment] if attachment else []

        message = email_service.build_message(submission, self.config, attachments)

        self._deliver(message)

    def _deliver(self, message: EmailMessage) -> None:
        """
        Send the message through the gateway (synchronous, no retries).

        Raises:
            UpstreamDeliveryError: If the gateway reports failure
        """
        start_time = time.time()

        result = self.gateway.send(message)

        elapsed = time.time() - start_time
        logger.info(f"Gateway call completed: {result!r} ({elapsed:.3f}s)")

        if not result.success:
            raise UpstreamDeliveryError(result.response_text)
