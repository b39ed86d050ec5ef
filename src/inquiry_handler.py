"""
AWS Lambda handler for equipment pickup inquiries submitted from the website.

Thin orchestration layer that delegates to InquiryProcessor.
Policy: one synchronous send per request, no retries. Errors logged to CloudWatch.
"""

import json
import logging
import os
from typing import Dict, Any

from domain.errors import ConfigurationError
from domain.inquiry_processor import InquiryProcessor
from domain.models import HandlerConfig
from integrations.mailchannels import MailChannelsGateway

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')
EMAIL_GATEWAY = os.environ.get('EMAIL_GATEWAY', 'mailchannels').lower()


def build_gateway(name: str):
    """
    Create the delivery gateway named by EMAIL_GATEWAY.

    Raises:
        ConfigurationError: If the name is not a known gateway
    """
    if name == 'mailchannels':
        return MailChannelsGateway.from_environ()
    if name == 'ses':
        # boto3 client is created on import, only when SES is selected
        from integrations.ses import SesGateway
        return SesGateway()
    raise ConfigurationError(
        f"EMAIL_GATEWAY must be 'mailchannels' or 'ses', got: '{name}'"
    )


# Initialize processor once at module level (reused across invocations)
try:
    inquiry_processor = InquiryProcessor(
        config=HandlerConfig.from_environ(),
        gateway=build_gateway(EMAIL_GATEWAY)
    )
except ConfigurationError as e:
    logger.error(f"Module initialization failed: {e}")
    raise


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Handle an inquiry form submission from API Gateway.

    Args:
        event: API Gateway proxy event (REST or HTTP API)
        context: Lambda context

    Returns:
        Lambda proxy response with a plain-text body
    """
    request_id = getattr(context, 'aws_request_id', None) or 'local'
    logger.info(f"Inquiry handler invoked: request_id={request_id}, environment={ENVIRONMENT}")

    response = inquiry_processor.handle(event)

    logger.info(f"Inquiry handler finished: request_id={request_id}, status={response['statusCode']}")
    return response


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({
            'status': 'healthy',
            'environment': ENVIRONMENT,
            'gateway': inquiry_processor.gateway.name
        })
    }
