"""boto3 client construction and botocore error classification."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .config import WagonConfig
from .exceptions import AuthError, RepositoryConnectionError
from .location import RemoteLocation
from .models import AuthenticationInfo, BucketIdentity

logger = logging.getLogger(__name__)

# Backblaze B2 exposes an S3-compatible API per region.
B2_ENDPOINT_TEMPLATE = "https://s3.{region}.backblazeb2.com"
DEFAULT_REGIONS: Dict[str, str] = {
    "s3": "us-east-1",
    "b2": "us-west-004",
}

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound", "NoSuchBucket"})
AUTH_CODES = frozenset(
    {"401", "403", "AccessDenied", "InvalidAccessKeyId", "SignatureDoesNotMatch", "Unauthorized"}
)


def error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def is_not_found(exc: BaseException) -> bool:
    return isinstance(exc, ClientError) and error_code(exc) in NOT_FOUND_CODES


def is_auth_failure(exc: BaseException) -> bool:
    return isinstance(exc, ClientError) and error_code(exc) in AUTH_CODES


def resolve_region(location: RemoteLocation, config: WagonConfig) -> str:
    return config.region or DEFAULT_REGIONS[location.scheme]


def resolve_endpoint(location: RemoteLocation, config: WagonConfig) -> Optional[str]:
    if config.endpoint_url:
        return config.endpoint_url
    if location.scheme == "b2":
        return B2_ENDPOINT_TEMPLATE.format(region=resolve_region(location, config))
    return None


def build_client(location: RemoteLocation, credentials: AuthenticationInfo, config: WagonConfig) -> Any:
    """Create an S3 API client for ``location``.

    Retries are disabled: a failed call is surfaced to the caller immediately.
    """
    session = boto3.session.Session(
        aws_access_key_id=credentials.username,
        aws_secret_access_key=credentials.password,
        region_name=resolve_region(location, config),
    )
    client_config = Config(
        user_agent_extra=config.user_agent,
        connect_timeout=config.connect_timeout,
        read_timeout=config.read_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )
    endpoint_url = resolve_endpoint(location, config)
    logger.debug(
        "Creating %s client (endpoint=%s, region=%s)",
        location.scheme,
        endpoint_url or "default",
        session.region_name,
    )
    return session.client("s3", endpoint_url=endpoint_url, config=client_config)


def probe_bucket(client: Any, bucket: str) -> BucketIdentity:
    """Confirm ``bucket`` exists and is accessible, returning its identity."""
    try:
        response = client.head_bucket(Bucket=bucket)
    except ClientError as exc:
        if is_auth_failure(exc):
            raise AuthError(
                f"Access to bucket {bucket} was denied. Ensure the credentials have access.",
                details={"bucket": bucket, "code": error_code(exc)},
            ) from exc
        if is_not_found(exc):
            raise RepositoryConnectionError(
                f"Bucket not found: {bucket}. Ensure the bucket exists and credentials have access.",
                details={"bucket": bucket},
            ) from exc
        raise RepositoryConnectionError(f"Failed to reach bucket {bucket}: {exc}", details={"bucket": bucket}) from exc
    except BotoCoreError as exc:
        raise RepositoryConnectionError(f"Failed to connect to bucket {bucket}: {exc}", details={"bucket": bucket}) from exc

    headers = response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    region = response.get("BucketRegion") or headers.get("x-amz-bucket-region")
    return BucketIdentity(name=bucket, region=region)
