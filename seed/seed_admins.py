#!/usr/bin/env python3
"""
Operator script to grant or revoke admin privileges.

An identity is an admin exactly when the admins table holds an entry for
its user id.

Run:
    python seed/seed_admins.py grant <USER-ID> [<USER-ID> ...] \
      --table admins \
      --endpoint-url http://localhost:4566

    python seed/seed_admins.py revoke <USER-ID>
"""

import argparse
import os
import sys
from datetime import UTC, datetime

import boto3
from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

logger = Logger(service="seed")

DEFAULT_TABLE = os.getenv("ADMIN_TABLE_NAME", "admins")
DEFAULT_ENDPOINT = os.getenv("AWS_ENDPOINT_URL")
DEFAULT_REGION = os.getenv("AWS_REGION", "us-east-1")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Grant or revoke admin entries")

    parser.add_argument(
        "action",
        choices=("grant", "revoke"),
        help="Add or remove the admin entry",
    )
    parser.add_argument(
        "user_ids",
        nargs="+",
        help="Identity user ids (Cognito usernames)",
    )
    parser.add_argument(
        "--table",
        default=DEFAULT_TABLE,
        help="Admins table name (default: $ADMIN_TABLE_NAME or 'admins')",
    )
    parser.add_argument(
        "--endpoint-url",
        default=DEFAULT_ENDPOINT,
        help="Custom AWS endpoint (e.g. LocalStack)",
    )
    parser.add_argument(
        "--region",
        default=DEFAULT_REGION,
        help="AWS region",
    )

    return parser.parse_args(argv)


def grant(table, user_id: str) -> bool:
    """Create the admin entry. Returns False if it already existed."""
    try:
        table.put_item(
            Item={"user_id": user_id, "granted_at": datetime.now(UTC).isoformat()},
            ConditionExpression="attribute_not_exists(user_id)",
        )
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
            return False
        raise
    return True


def revoke(table, user_id: str) -> bool:
    """Remove the admin entry. Returns False if there was none."""
    response = table.delete_item(Key={"user_id": user_id}, ReturnValues="ALL_OLD")
    return "Attributes" in response


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    table = boto3.resource(
        "dynamodb",
        region_name=args.region,
        endpoint_url=args.endpoint_url,
    ).Table(args.table)

    action = grant if args.action == "grant" else revoke

    try:
        for user_id in args.user_ids:
            changed = action(table, user_id)
            logger.info(
                "Admin entry updated" if changed else "Admin entry unchanged",
                extra={"action": args.action, "user_id": user_id, "table": args.table},
            )
    except ClientError as exc:
        logger.exception("Admin seeding failed", exc_info=exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
