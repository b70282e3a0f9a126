"""
Pytest configuration and fixtures for mind-target-service tests.
Provides AWS mocking, DynamoDB, S3 and Cognito fixtures with proper cleanup.
"""

import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("TARGET_ARTIFACT_BUCKET_NAME", "mind-targets-test")
os.environ.setdefault("TARGET_CATALOG_TABLE_NAME", "targets-test")
os.environ.setdefault("ADMIN_TABLE_NAME", "admins-test")
os.environ.setdefault("PROFILE_TABLE_NAME", "profiles-test")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "mind-target-service")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "MindTargetService")

from core.utils.config import get_config  # noqa: E402

TEST_PASSWORD = "Passw0rd!test"


@pytest.fixture(autouse=True)
def reset_config():
    """Configuration is cached per process; every test starts from the environment."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


def _create_targets_table(dynamodb_resource):
    """Helper to create the target catalog with its user index."""
    return dynamodb_resource.create_table(
        TableName=os.getenv("TARGET_CATALOG_TABLE_NAME"),
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "target_id", "KeyType": "HASH"}],
        AttributeDefinitions=[
            {"AttributeName": "target_id", "AttributeType": "S"},
            {"AttributeName": "user_id", "AttributeType": "S"},
            {"AttributeName": "created_at", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "user-created-index",
                "KeySchema": [
                    {"AttributeName": "user_id", "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
    )


def _create_user_table(dynamodb_resource, table_name: str):
    """Helper to create a table keyed by user_id (admins, profiles)."""
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "user_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "user_id", "AttributeType": "S"}],
    )


@pytest.fixture(scope="function")
def targets_table(dynamodb_resource):
    table = _create_targets_table(dynamodb_resource)
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def admins_table(dynamodb_resource):
    table = _create_user_table(dynamodb_resource, os.getenv("ADMIN_TABLE_NAME"))
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def profiles_table(dynamodb_resource):
    table = _create_user_table(dynamodb_resource, os.getenv("PROFILE_TABLE_NAME"))
    table.wait_until_exists()
    return table


@pytest.fixture(scope="function")
def domain_tables(targets_table, admins_table, profiles_table) -> dict[str, Any]:
    """All three domain tables, keyed by their logical name."""
    return {
        "targets": targets_table,
        "admins": admins_table,
        "profiles": profiles_table,
    }


@pytest.fixture
def put_target(targets_table) -> Callable[..., dict[str, Any]]:
    """
    Helper to insert a catalog row.

    Usage:
        item = put_target("t-1", user_id="alice")
    """

    def _put(target_id: str, *, user_id: str | None = None, created_at: str = "2024-01-01T10:00:00+00:00"):
        item = {
            "target_id": target_id,
            "image_url": f"https://cdn.example.com/targets/{target_id}.jpg",
            "video_url": "https://video.example.com/clip.mp4",
            "mind_url": f"https://cdn.example.com/minds/{target_id}.mind",
            "created_at": created_at,
        }
        if user_id:
            item["user_id"] = user_id
        targets_table.put_item(Item=item)
        return item

    return _put


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """Create the artifact bucket for testing."""
    bucket_name = os.getenv("TARGET_ARTIFACT_BUCKET_NAME")

    try:
        s3_client.create_bucket(Bucket=bucket_name)
    except ClientError as e:
        if e.response["Error"]["Code"] != "BucketAlreadyOwnedByYou":
            raise

    return s3_client


@pytest.fixture
def s3_get_object(s3_client) -> Callable[[str], bytes]:
    """
    Helper to get an object from the artifact bucket.

    Usage:
        content = s3_get_object("minds/<target_id>.mind")
    """

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_client.get_object(
            Bucket=os.getenv("TARGET_ARTIFACT_BUCKET_NAME"),
            Key=key,
        )
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def s3_list_keys(s3_client) -> Callable[[], list[str]]:
    def _list() -> list[str]:
        response = s3_client.list_objects_v2(Bucket=os.getenv("TARGET_ARTIFACT_BUCKET_NAME"))
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _list


@pytest.fixture(scope="function")
def cognito_client(aws_mock):
    return boto3.client("cognito-idp", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def user_pool(cognito_client, monkeypatch) -> dict[str, str]:
    """Create a user pool plus an app client and point the service at it."""
    pool_id = cognito_client.create_user_pool(PoolName="mind-target-users")["UserPool"]["Id"]
    client_id = cognito_client.create_user_pool_client(
        UserPoolId=pool_id,
        ClientName="mind-target-tests",
        ExplicitAuthFlows=["ADMIN_NO_SRP_AUTH"],
    )["UserPoolClient"]["ClientId"]

    monkeypatch.setenv("COGNITO_USER_POOL_ID", pool_id)
    get_config.cache_clear()

    return {"pool_id": pool_id, "client_id": client_id}


@pytest.fixture
def cognito_user(cognito_client, user_pool) -> Callable[..., str]:
    """
    Helper to create a confirmed user and return an access token for it.

    Usage:
        token = cognito_user("alice", email="alice@example.com")
    """

    def _create(username: str, *, email: str | None = None) -> str:
        attributes = [{"Name": "email", "Value": email}] if email else []

        cognito_client.admin_create_user(
            UserPoolId=user_pool["pool_id"],
            Username=username,
            TemporaryPassword=TEST_PASSWORD,
            UserAttributes=attributes,
            MessageAction="SUPPRESS",
        )
        cognito_client.admin_set_user_password(
            UserPoolId=user_pool["pool_id"],
            Username=username,
            Password=TEST_PASSWORD,
            Permanent=True,
        )
        response = cognito_client.admin_initiate_auth(
            UserPoolId=user_pool["pool_id"],
            ClientId=user_pool["client_id"],
            AuthFlow="ADMIN_NO_SRP_AUTH",
            AuthParameters={"USERNAME": username, "PASSWORD": TEST_PASSWORD},
        )
        token: str = response["AuthenticationResult"]["AccessToken"]
        return token

    return _create


@pytest.fixture
def cognito_user_exists(cognito_client, user_pool) -> Callable[[str], bool]:
    def _exists(username: str) -> bool:
        try:
            cognito_client.admin_get_user(UserPoolId=user_pool["pool_id"], Username=username)
        except ClientError as e:
            if e.response["Error"]["Code"] == "UserNotFoundException":
                return False
            raise
        return True

    return _exists


@pytest.fixture
def sample_image_binary() -> bytes:
    """Sample binary image data (1x1 PNG)."""
    import base64

    png_base64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
    return base64.b64decode(png_base64)


@pytest.fixture
def sample_jpeg_binary() -> bytes:
    """Sample binary JPEG data (minimal valid JPEG)."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xdb\x00C\x00\x08\x06\x06\x07\x06\x05\x08\x07\x07\x07\t\t\x08\n\x0c"
        b"\x14\r\x0c\x0b\x0b\x0c\x19\x12\x13\x0f\x14\x1d\x1a\x1f\x1e\x1d\x1a\x1c"
        b"\x1c $.' \",#\x1c\x1c(7),01444\x1f'9=82<.342\xff\xc0\x00\x0b\x08"
        b"\x00\x01\x00\x01\x01\x01\x11\x00\xff\xc4\x00\x14\x00\x01\x00\x00\x00"
        b"\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\t\xff\xc4\x00\x14\x10"
        b"\x01\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
        b"\xff\xda\x00\x08\x01\x01\x00\x00?\x00\x7f\x00\xff\xd9"
    )
