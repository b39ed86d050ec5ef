"""
Tests for the inquiry processing pipeline.
"""

import base64
import pytest
import sys
import os
from unittest.mock import patch

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.inquiry_processor import InquiryProcessor, is_valid_email, validate_submission
from domain.errors import ClientInputError
from domain.models import DeliveryResult, HandlerConfig, InquirySubmission, UploadedFile
from services.multipart import FormData

from conftest import VALID_FIELDS, build_event

LIMIT = 8 * 1024 * 1024


class FakeGateway:
    """Records sent messages and replies with a canned result or error."""

    name = 'fake'

    def __init__(self, result=None, error=None):
        self.result = result or DeliveryResult(success=True, status_code=202)
        self.error = error
        self.sent = []

    def send(self, message):
        self.sent.append(message)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def processor(gateway):
    return InquiryProcessor(HandlerConfig(), gateway)


def form_with_file(uploaded):
    return FormData(fields=dict(VALID_FIELDS), files={'inventoryFile': uploaded})


class TestEmailValidation:
    """Test the email shape check."""

    @pytest.mark.parametrize('email', [
        'jane@acme.com',
        'j.doe+pickup@mail.acme.co.uk',
        'a@b.c',
    ])
    def test_valid(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize('email', [
        'jane.acme.com',
        'jane@acme',
        'jane doe@acme.com',
        'jane@ac me.com',
        'jane@@acme.com',
        '@acme.com',
        'jane@.',
    ])
    def test_invalid(self, email):
        assert is_valid_email(email) is False


class TestValidateSubmission:

    def test_missing_field_checked_before_email(self):
        """Test missing fields win over a bad email."""
        submission = InquirySubmission(
            company_name='', contact_name='Jane', pickup_city_state='Austin, TX',
            email='not-an-email', phone='555'
        )

        with pytest.raises(ClientInputError, match="Missing required fields"):
            validate_submission(submission)


class TestDispatch:
    """Test method dispatch."""

    def test_preflight(self, processor, gateway):
        """Test OPTIONS returns 204 with CORS headers and no processing."""
        event = {'httpMethod': 'OPTIONS', 'headers': {}, 'body': 'garbage'}

        with patch('domain.inquiry_processor.multipart_service.parse_form_data') as mock_parse:
            response = processor.handle(event)

        assert response['statusCode'] == 204
        assert response['body'] == ''
        assert response['headers']['Access-Control-Allow-Origin'] == '*'
        assert response['headers']['Access-Control-Allow-Methods'] == 'POST, OPTIONS'
        assert response['headers']['Access-Control-Allow-Headers'] == 'Content-Type'
        mock_parse.assert_not_called()
        assert gateway.sent == []

    def test_preflight_http_api_event(self, processor):
        event = {'requestContext': {'http': {'method': 'OPTIONS'}}}

        assert processor.handle(event)['statusCode'] == 204

    @pytest.mark.parametrize('method', ['GET', 'PUT', 'DELETE', 'PATCH', 'HEAD', ''])
    def test_method_not_allowed(self, processor, gateway, method):
        response = processor.handle(build_event(method=method))

        assert response['statusCode'] == 405
        assert response['body'] == 'Method Not Allowed'
        assert gateway.sent == []


class TestValidation:
    """Test field validation responses."""

    @pytest.mark.parametrize('field', ['companyName', 'contactName', 'pickupCityState', 'email', 'phone'])
    def test_missing_required_field(self, processor, gateway, field):
        fields = dict(VALID_FIELDS)
        del fields[field]

        response = processor.handle(build_event(fields=fields))

        assert response['statusCode'] == 400
        assert response['body'] == 'Missing required fields'
        assert gateway.sent == []

    @pytest.mark.parametrize('field', ['companyName', 'contactName', 'pickupCityState', 'email', 'phone'])
    def test_whitespace_only_field(self, processor, gateway, field):
        fields = dict(VALID_FIELDS)
        fields[field] = '   \t '

        response = processor.handle(build_event(fields=fields))

        assert response['statusCode'] == 400
        assert response['body'] == 'Missing required fields'
        assert gateway.sent == []

    @pytest.mark.parametrize('email', ['jane.acme.com', 'jane@acme', 'jane doe@acme.com'])
    def test_invalid_email(self, processor, gateway, email):
        fields = dict(VALID_FIELDS, email=email)

        response = processor.handle(build_event(fields=fields))

        assert response['statusCode'] == 400
        assert response['body'] == 'Invalid email address'
        assert gateway.sent == []

    def test_invalid_email_checked_before_attachment(self, processor, gateway):
        """Test a bad email is reported even when an oversized file is attached."""
        oversized = UploadedFile(name='big.zip', mime_type='', size_bytes=LIMIT + 1, reader=lambda: b'')
        form = FormData(fields=dict(VALID_FIELDS, email='bad'), files={'inventoryFile': oversized})

        with patch('domain.inquiry_processor.multipart_service.parse_form_data', return_value=form):
            response = processor.handle(build_event())

        assert response['statusCode'] == 400
        assert response['body'] == 'Invalid email address'

    def test_email_surrounding_whitespace_trimmed(self, processor, gateway):
        fields = dict(VALID_FIELDS, email='  jane@acme.com  ')

        response = processor.handle(build_event(fields=fields))

        assert response['statusCode'] == 200
        assert gateway.sent[0].reply_to_address == 'jane@acme.com'


class TestAttachments:
    """Test attachment handling limits."""

    def test_oversized_file(self, processor, gateway):
        """Test 8,388,609 bytes returns 413 and nothing is sent."""
        uploaded = UploadedFile.from_bytes('huge.zip', 'application/zip', b'x' * (LIMIT + 1))

        with patch('domain.inquiry_processor.multipart_service.parse_form_data',
                   return_value=form_with_file(uploaded)):
            response = processor.handle(build_event())

        assert response['statusCode'] == 413
        assert 'sales@wipe-recycle.com' in response['body']
        assert gateway.sent == []

    def test_file_exactly_at_limit(self, processor, gateway):
        """Test 8,388,608 bytes is attached and sent."""
        content = b'y' * LIMIT
        uploaded = UploadedFile.from_bytes('big.zip', 'application/zip', content)

        with patch('domain.inquiry_processor.multipart_service.parse_form_data',
                   return_value=form_with_file(uploaded)):
            response = processor.handle(build_event())

        assert response['statusCode'] == 200
        assert len(gateway.sent) == 1
        attachments = gateway.sent[0].attachments
        assert len(attachments) == 1
        assert base64.b64decode(attachments[0].content) == content
        assert 'big.zip (8192 KB)' in gateway.sent[0].body

    def test_uploaded_file_end_to_end(self, processor, gateway):
        """Test a real multipart upload ends up as the email attachment."""
        content = b'host,qty\r\nR740,12\r\nR640,4\r\n'
        event = build_event(files={'inventoryFile': ('servers.csv', 'text/csv', content)})

        response = processor.handle(event)

        assert response['statusCode'] == 200
        payload = gateway.sent[0].to_payload()
        assert payload['attachments'] == [{
            'content': base64.b64encode(content).decode('ascii'),
            'filename': 'servers.csv',
            'type': 'text/csv',
            'disposition': 'attachment',
        }]
        assert 'Inventory Upload:   servers.csv (0 KB)' in payload['content'][0]['value']

    def test_empty_file_ignored(self, processor, gateway):
        event = build_event(files={'inventoryFile': ('', 'application/octet-stream', b'')})

        response = processor.handle(event)

        assert response['statusCode'] == 200
        assert gateway.sent[0].attachments == []
        assert 'Inventory Upload:   (none provided)' in gateway.sent[0].body

    def test_oversized_limit_uses_configured_address(self):
        gateway = FakeGateway()
        processor = InquiryProcessor(HandlerConfig(to_email='ops@example.com'), gateway)
        uploaded = UploadedFile(name='big.zip', mime_type='', size_bytes=LIMIT + 1, reader=lambda: b'')

        with patch('domain.inquiry_processor.multipart_service.parse_form_data',
                   return_value=form_with_file(uploaded)):
            response = processor.handle(build_event())

        assert response['statusCode'] == 413
        assert 'ops@example.com' in response['body']


class TestDelivery:
    """Test delivery outcomes and response mapping."""

    def test_success(self, processor, gateway):
        """Test the Acme Corp scenario end to end."""
        response = processor.handle(build_event())

        assert response['statusCode'] == 200
        assert response['body'] == 'OK'
        assert response['headers']['Access-Control-Allow-Origin'] == '*'

        message = gateway.sent[0]
        assert message.subject == 'New Equipment Inquiry: Acme Corp (Austin, TX)'
        lines = message.body.splitlines()
        assert 'Inventory Upload:   (none provided)' in lines
        assert lines[lines.index('Notes:') + 1] == '(none)'
        assert message.to_address == 'sales@wipe-recycle.com'
        assert message.reply_to_address == 'jane@acme.com'
        assert message.reply_to_name == 'Jane Doe'
        assert message.attachments == []

    def test_gateway_rejects(self, processor, gateway):
        """Test a gateway failure returns 502 with the upstream text."""
        gateway.result = DeliveryResult(success=False, status_code=500, response_text='quota exceeded')

        response = processor.handle(build_event())

        assert response['statusCode'] == 502
        assert 'quota exceeded' in response['body']
        assert len(gateway.sent) == 1

    def test_gateway_raises(self, processor, gateway):
        """Test a network error returns a generic 500."""
        gateway.error = ConnectionError('connection reset by peer')

        response = processor.handle(build_event())

        assert response['statusCode'] == 500
        assert response['body'] == 'Server error'
        assert 'connection reset' not in response['body']

    def test_parse_failure(self, processor, gateway):
        """Test an unparseable body returns a generic 500."""
        response = processor.handle(build_event(content_type='application/json', body=b'{}'))

        assert response['statusCode'] == 500
        assert response['body'] == 'Server error'
        assert gateway.sent == []

    def test_single_send_per_request(self, processor, gateway):
        gateway.result = DeliveryResult(success=False, status_code=503, response_text='unavailable')

        processor.handle(build_event())

        assert len(gateway.sent) == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
