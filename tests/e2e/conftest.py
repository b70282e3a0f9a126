"""
Fixtures for end-to-end tests against a LocalStack deployment.

Every test is skipped when no deployment is reachable.
"""

import base64
import logging
import os
import uuid

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError

from e2e_api_client import E2EAPIClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

ENDPOINT_BASE_URL = os.getenv("E2E_ENDPOINT_URL", "http://localhost:4566")
STAGE = os.getenv("E2E_STAGE", "snd")
API_NAME_FRAGMENT = "mind-target"
ADMIN_TABLE_NAME = os.getenv("E2E_ADMIN_TABLE_NAME", f"mind-target-admins-{STAGE}")
TEST_PASSWORD = "Passw0rd!e2e"

SAMPLE_JPEG_BASE64 = "/9j/4AAQSkZJRgABAQEAYABgAAD/2wBDAAgGBgcGBQgHBwcJCQgKDBQNDAsLDBkSEw8UHRofHh0aHBwgJC4nICIsIxwcKDcpLDAxNDQ0Hyc5PTgyPC4zNDL/2wBDAQkJCQwLDBgNDRgyIRwhMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjIyMjL/wAARCAABAAEDASIAAhEBAxEB/8QAFQABAQAAAAAAAAAAAAAAAAAAAAv/xAAUEAEAAAAAAAAAAAAAAAAAAAAA/8VAFQEBAQAAAAAAAAAAAAAAAAAAAAX/xAAUEQEAAAAAAAAAAAAAAAAAAAAA/9oADAMBAAIRAxEAPwCwAA8A/9k="


# ============================================================================
# Deployment Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def api_details():
    """Get API Gateway and Cognito details from LocalStack"""
    try:
        apigateway = boto3.client("apigateway", endpoint_url=ENDPOINT_BASE_URL)
        api = next(api for api in apigateway.get_rest_apis()["items"] if API_NAME_FRAGMENT in api["name"])

        cognito = boto3.client("cognito-idp", endpoint_url=ENDPOINT_BASE_URL)
        pool = next(p for p in cognito.list_user_pools(MaxResults=10)["UserPools"] if API_NAME_FRAGMENT in p["Name"])
        client = cognito.list_user_pool_clients(UserPoolId=pool["Id"], MaxResults=10)["UserPoolClients"][0]

        return {
            "endpoint": f"{ENDPOINT_BASE_URL}/restapis/{api['id']}/{STAGE}/_user_request_",
            "pool_id": pool["Id"],
            "client_id": client["ClientId"],
        }
    except (BotoCoreError, ClientError, StopIteration, IndexError, KeyError) as e:
        logger.warning(f"Could not get deployment details from LocalStack: {e}")
        pytest.skip(f"Could not get deployment details from LocalStack: {e}")


@pytest.fixture
def api_client(api_details):
    """HTTP client wrapper for E2E API testing"""
    return E2EAPIClient(api_details["endpoint"], {})


@pytest.fixture
def create_user(api_details):
    """Create confirmed Cognito users; returns (username, access token)."""
    cognito = boto3.client("cognito-idp", endpoint_url=ENDPOINT_BASE_URL)
    created: list[str] = []

    def _create(prefix: str) -> tuple[str, str]:
        username = f"{prefix}-{uuid.uuid4().hex[:8]}"
        cognito.admin_create_user(
            UserPoolId=api_details["pool_id"],
            Username=username,
            TemporaryPassword=TEST_PASSWORD,
            MessageAction="SUPPRESS",
        )
        cognito.admin_set_user_password(
            UserPoolId=api_details["pool_id"],
            Username=username,
            Password=TEST_PASSWORD,
            Permanent=True,
        )
        auth = cognito.admin_initiate_auth(
            UserPoolId=api_details["pool_id"],
            ClientId=api_details["client_id"],
            AuthFlow="ADMIN_USER_PASSWORD_AUTH",
            AuthParameters={"USERNAME": username, "PASSWORD": TEST_PASSWORD},
        )
        created.append(username)
        return username, auth["AuthenticationResult"]["AccessToken"]

    yield _create

    for username in created:
        try:
            cognito.admin_delete_user(UserPoolId=api_details["pool_id"], Username=username)
        except ClientError as err:
            if err.response["Error"]["Code"] != "UserNotFoundException":
                logger.error("Failed to cleanup user %s", username, exc_info=err)


@pytest.fixture
def grant_admin(api_details):
    table = boto3.resource("dynamodb", endpoint_url=ENDPOINT_BASE_URL).Table(ADMIN_TABLE_NAME)
    granted: list[str] = []

    def _grant(user_id: str) -> None:
        table.put_item(Item={"user_id": user_id})
        granted.append(user_id)

    yield _grant

    for user_id in granted:
        table.delete_item(Key={"user_id": user_id})


@pytest.fixture
def sample_jpeg() -> bytes:
    return base64.b64decode(SAMPLE_JPEG_BASE64)
