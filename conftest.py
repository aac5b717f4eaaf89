"""Shared pytest fixtures: an emulated bucket and a connected adapter."""

from __future__ import annotations

from typing import Iterator, List

import boto3
import pytest
from moto import mock_aws

from bucket_wagon.config import WagonConfig
from bucket_wagon.interfaces import SessionListener, TransferListener
from bucket_wagon.models import AuthenticationInfo, Repository
from bucket_wagon.wagon import BucketWagon

TEST_BUCKET_NAME = "test-bucket"
TEST_REPOSITORY_URL = f"s3://{TEST_BUCKET_NAME}/path/to/repo"
TEST_REGION = "us-east-1"


class RecordingListener(TransferListener, SessionListener):
    """Collects event names in the order they are fired."""

    def __init__(self) -> None:
        self.events: List[str] = []
        self.transfer_events = []

    def transfer_initiated(self, event) -> None:
        self._record("initiated", event)

    def transfer_started(self, event) -> None:
        self._record("started", event)

    def transfer_completed(self, event) -> None:
        self._record("completed", event)

    def transfer_error(self, event) -> None:
        self._record("error", event)

    def session_opening(self, event) -> None:
        self.events.append("opening")

    def session_opened(self, event) -> None:
        self.events.append("opened")

    def session_disconnecting(self, event) -> None:
        self.events.append("disconnecting")

    def session_disconnected(self, event) -> None:
        self.events.append("disconnected")

    def _record(self, name, event) -> None:
        self.events.append(name)
        self.transfer_events.append(event)


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def mocked_aws() -> Iterator:
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def auth_info() -> AuthenticationInfo:
    return AuthenticationInfo(username="testKeyId", password="testApplicationKey")


@pytest.fixture
def repository() -> Repository:
    return Repository(id="test-repo", url=TEST_REPOSITORY_URL)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def wagon(mocked_aws, repository, auth_info, listener) -> Iterator[BucketWagon]:
    wagon = BucketWagon(WagonConfig(region=TEST_REGION))
    wagon.add_transfer_listener(listener)
    wagon.connect(repository, auth_info)
    yield wagon
    wagon.disconnect()
