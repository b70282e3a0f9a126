"""Mind Target Service Package."""

__version__ = "1.0.0"
__description__ = (
    "Serverless AR target ingestion and admin account deletion using AWS Lambda, "
    "S3, DynamoDB and Cognito"
)

__all__ = ["handlers", "core"]
