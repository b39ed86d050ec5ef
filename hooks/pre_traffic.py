import json
import boto3
import os
import logging

logger = logging.getLogger()
logger.setLevel(logging.INFO)

codedeploy = boto3.client('codedeploy')
lambda_client = boto3.client('lambda')

# Pre-flight probe: exercises the handler without sending any email
PREFLIGHT_EVENT = {
    'httpMethod': 'OPTIONS',
    'headers': {
        'Origin': 'https://wipe-recycle.com',
        'Access-Control-Request-Method': 'POST'
    },
    'requestContext': {'requestId': 'pre-deployment-test'},
    'body': None
}


def validate_preflight_response(payload):
    """
    Check the new version answers the pre-flight probe correctly.

    Raises:
        Exception: If status or CORS headers are wrong
    """
    if payload.get('statusCode') != 204:
        raise Exception(f"Invalid response status: {payload.get('statusCode')}")

    headers = payload.get('headers') or {}
    if headers.get('Access-Control-Allow-Origin') != '*':
        raise Exception(f"Missing CORS origin header: {headers}")
    if 'POST' not in headers.get('Access-Control-Allow-Methods', ''):
        raise Exception(f"POST not allowed by pre-flight response: {headers}")


def lambda_handler(event, context):
    """
    Pre-traffic hook for CodeDeploy.
    Runs a pre-flight smoke test before shifting traffic to the new version.
    """
    logger.info(f"Pre-traffic hook triggered: {json.dumps(event)}")

    deployment_id = event['DeploymentId']
    lifecycle_event_hook_execution_id = event['LifecycleEventHookExecutionId']

    try:
        target_function = os.environ.get('TARGET_FUNCTION')

        logger.info(f"Running smoke test on {target_function}")

        response = lambda_client.invoke(
            FunctionName=target_function,
            InvocationType='RequestResponse',
            Payload=json.dumps(PREFLIGHT_EVENT)
        )

        response_payload = json.loads(response['Payload'].read())
        logger.info(f"Test response: {json.dumps(response_payload)}")

        if response.get('FunctionError'):
            raise Exception(f"Function returned error: {response_payload}")

        if response.get('StatusCode') != 200:
            raise Exception(f"Unexpected status code: {response.get('StatusCode')}")

        validate_preflight_response(response_payload)

        logger.info("Pre-traffic validation passed")

        # Report success
        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Succeeded'
        )

        return {
            'statusCode': 200,
            'body': json.dumps('Pre-traffic validation succeeded')
        }

    except Exception as e:
        logger.error(f"Pre-traffic validation failed: {str(e)}", exc_info=True)

        # Report failure - this will prevent deployment
        codedeploy.put_lifecycle_event_hook_execution_status(
            deploymentId=deployment_id,
            lifecycleEventHookExecutionId=lifecycle_event_hook_execution_id,
            status='Failed'
        )

        return {
            'statusCode': 500,
            'body': json.dumps(f'Pre-traffic validation failed: {str(e)}')
        }
