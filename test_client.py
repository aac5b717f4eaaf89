from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from bucket_wagon.client import build_client, is_not_found, probe_bucket, resolve_endpoint
from bucket_wagon.config import WagonConfig
from bucket_wagon.exceptions import AuthError, RepositoryConnectionError
from bucket_wagon.location import parse_repository_url
from bucket_wagon.models import AuthenticationInfo


def client_error(code, operation="HeadBucket"):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def test_b2_urls_target_the_regional_endpoint():
    location = parse_repository_url("b2://bucket/repo")
    assert resolve_endpoint(location, WagonConfig()) == "https://s3.us-west-004.backblazeb2.com"
    assert resolve_endpoint(location, WagonConfig(region="eu-central-003")) == "https://s3.eu-central-003.backblazeb2.com"


def test_explicit_endpoint_wins():
    location = parse_repository_url("b2://bucket/repo")
    assert resolve_endpoint(location, WagonConfig(endpoint_url="http://localhost:9000")) == "http://localhost:9000"


def test_s3_urls_use_the_default_endpoint():
    assert resolve_endpoint(parse_repository_url("s3://bucket"), WagonConfig()) is None


def test_build_client_for_b2():
    client = build_client(
        parse_repository_url("b2://bucket/repo"),
        AuthenticationInfo("keyId", "appKey"),
        WagonConfig(),
    )
    assert client.meta.endpoint_url == "https://s3.us-west-004.backblazeb2.com"
    assert client.meta.region_name == "us-west-004"


def test_probe_returns_bucket_identity():
    client = MagicMock()
    client.head_bucket.return_value = {
        "ResponseMetadata": {"HTTPHeaders": {"x-amz-bucket-region": "us-west-004"}},
    }
    identity = probe_bucket(client, "releases")
    assert identity.name == "releases"
    assert identity.region == "us-west-004"


@pytest.mark.parametrize("code", ["404", "NoSuchBucket", "500"])
def test_probe_maps_missing_or_failing_bucket_to_connection_error(code):
    client = MagicMock()
    client.head_bucket.side_effect = client_error(code)
    with pytest.raises(RepositoryConnectionError):
        probe_bucket(client, "releases")


@pytest.mark.parametrize("code", ["403", "AccessDenied", "InvalidAccessKeyId"])
def test_probe_maps_rejected_credentials_to_auth_error(code):
    client = MagicMock()
    client.head_bucket.side_effect = client_error(code)
    with pytest.raises(AuthError):
        probe_bucket(client, "releases")


def test_probe_maps_network_failures_to_connection_error():
    client = MagicMock()
    client.head_bucket.side_effect = EndpointConnectionError(endpoint_url="https://example.invalid")
    with pytest.raises(RepositoryConnectionError) as excinfo:
        probe_bucket(client, "releases")
    assert isinstance(excinfo.value.__cause__, EndpointConnectionError)


def test_is_not_found():
    assert is_not_found(client_error("NoSuchKey", "GetObject"))
    assert not is_not_found(client_error("500", "GetObject"))
    assert not is_not_found(ValueError("404"))
