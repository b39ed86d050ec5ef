"""
Amazon SES Email Delivery Gateway

Alternative to the MailChannels gateway for deployments that send through
SES. The EmailMessage is rendered as a raw MIME message so the inventory
attachment and Reply-To header are carried over unchanged.

Usage:
    from integrations.ses import SesGateway

    result = SesGateway().send(message)
"""

import base64
import logging
import os
import time
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.models import DeliveryResult, EmailMessage

logger = logging.getLogger(__name__)

# NO retries and strict timeouts; a failed send is reported, not retried
ses_config = Config(
    retries={
        'max_attempts': 0,
        'mode': 'standard'
    },
    connect_timeout=10,
    read_timeout=30
)

region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))

# Module-level client (reused across invocations)
ses_client = boto3.client('sesv2', region_name=region, config=ses_config)
logger.info(f"SES client initialized: region={region}, connect=10s, read=30s, no retries")


def build_raw_message(message: EmailMessage) -> bytes:
    """
    Render an EmailMessage as RFC 5322 bytes.

    Args:
        message: Envelope to render

    Returns:
        bytes: MIME message with a text/plain part and one part per attachment
    """
    msg = MIMEMultipart()
    msg['From'] = formataddr((message.from_name, message.from_address))
    msg['To'] = message.to_address
    msg['Reply-To'] = formataddr((message.reply_to_name, message.reply_to_address))
    msg['Subject'] = message.subject

    msg.attach(MIMEText(message.body, 'plain', 'utf-8'))

    for attachment in message.attachments:
        maintype, _, subtype = attachment.content_type.partition('/')
        if not subtype:
            maintype, subtype = 'application', 'octet-stream'
        part = MIMEBase(maintype, subtype, name=attachment.filename)
        part.set_payload(base64.b64decode(attachment.content))
        encoders.encode_base64(part)
        part.add_header('Content-Disposition', attachment.disposition, filename=attachment.filename)
        msg.attach(part)

    return msg.as_bytes()


class SesGateway:
    """Delivery gateway backed by Amazon SES (sesv2 SendEmail, raw content)."""

    name = 'ses'

    def __init__(self, client=None):
        self.client = client or ses_client

    def send(self, message: EmailMessage) -> DeliveryResult:
        """
        Submit the message to SES.

        Returns:
            DeliveryResult: failed result carrying the AWS error message when
            SES rejects the request

        Raises:
            botocore.exceptions.BotoCoreError: On connection failure or timeout
        """
        start_time = time.time()
        logger.info(
            f"Sending email via SES: to={message.to_address}, "
            f"subject={message.subject!r}, attachments={len(message.attachments)}"
        )

        try:
            response = self.client.send_email(
                FromEmailAddress=formataddr((message.from_name, message.from_address)),
                Destination={'ToAddresses': [message.to_address]},
                ReplyToAddresses=[message.reply_to_address],
                Content={'Raw': {'Data': build_raw_message(message)}}
            )
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))
            status_code = e.response.get('ResponseMetadata', {}).get('HTTPStatusCode', 400)

            logger.error(
                f"SES send failed: error_code={error_code}, "
                f"error_message={error_message}, status={status_code}"
            )
            return DeliveryResult(
                success=False,
                status_code=status_code,
                response_text=f"{error_code}: {error_message}"
            )

        message_id = response.get('MessageId', '')
        elapsed = time.time() - start_time
        logger.info(f"SES accepted message: message_id={message_id} ({elapsed:.2f}s)")

        return DeliveryResult(
            success=True,
            status_code=response.get('ResponseMetadata', {}).get('HTTPStatusCode', 200),
            response_text=message_id
        )
