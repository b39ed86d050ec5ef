"""
MailChannels Email Delivery Gateway

Sends an EmailMessage through the MailChannels transactional email API with
a single synchronous HTTPS POST. Any provider accepting the same JSON
contract can be used by pointing MAILCHANNELS_API_URL at it.

Usage:
    from integrations.mailchannels import MailChannelsGateway

    gateway = MailChannelsGateway.from_environ()
    result = gateway.send(message)
    if not result.success:
        print(result.response_text)
"""

import logging
import os
import time
from typing import Dict, Optional

import requests

from domain.models import DeliveryResult, EmailMessage

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://api.mailchannels.net/tx/v1/send'
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_READ_TIMEOUT = 30


class MailChannelsGateway:
    """
    Delivery gateway backed by the MailChannels HTTP API.

    No retries are performed; network errors and timeouts propagate as
    requests.RequestException.
    """

    name = 'mailchannels'

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        api_key: Optional[str] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = (connect_timeout, read_timeout)

    @classmethod
    def from_environ(cls) -> 'MailChannelsGateway':
        """
        Build gateway from environment variables.

        Reads MAILCHANNELS_API_URL, MAILCHANNELS_API_KEY,
        MAILCHANNELS_CONNECT_TIMEOUT and MAILCHANNELS_READ_TIMEOUT.
        """
        gateway = cls(
            api_url=os.environ.get('MAILCHANNELS_API_URL') or DEFAULT_API_URL,
            api_key=os.environ.get('MAILCHANNELS_API_KEY') or None,
            connect_timeout=float(os.environ.get('MAILCHANNELS_CONNECT_TIMEOUT', DEFAULT_CONNECT_TIMEOUT)),
            read_timeout=float(os.environ.get('MAILCHANNELS_READ_TIMEOUT', DEFAULT_READ_TIMEOUT))
        )
        logger.info(
            f"MailChannels gateway initialized: url={gateway.api_url}, "
            f"api_key={'set' if gateway.api_key else 'unset'}, "
            f"timeout={gateway.timeout}, no retries"
        )
        return gateway

    def _headers(self) -> Dict[str, str]:
        headers = {'content-type': 'application/json'}
        if self.api_key:
            headers['X-Api-Key'] = self.api_key
        return headers

    def send(self, message: EmailMessage) -> DeliveryResult:
        """
        Submit the message to MailChannels.

        Args:
            message: Envelope to deliver

        Returns:
            DeliveryResult: success is True for any 2xx response

        Raises:
            requests.RequestException: On connection failure or timeout
        """
        start_time = time.time()
        logger.info(
            f"Sending email via MailChannels: to={message.to_address}, "
            f"subject={message.subject!r}, attachments={len(message.attachments)}"
        )

        response = requests.post(
            self.api_url,
            json=message.to_payload(),
            headers=self._headers(),
            timeout=self.timeout
        )

        response_text = response.text
        elapsed = time.time() - start_time
        logger.info(f"MailChannels status: {response.status_code} ({elapsed:.2f}s)")
        logger.info(f"MailChannels response: {response_text}")

        return DeliveryResult(
            success=200 <= response.status_code < 300,
            status_code=response.status_code,
            response_text=response_text
        )
