"""Repository transfer adapter backed by an object-storage bucket.

Usage::

    wagon = BucketWagon()
    wagon.add_transfer_listener(LoggingTransferListener())
    wagon.connect(
        Repository(id="releases", url="b2://bucket-name/path/to/repo"),
        AuthenticationInfo(username="applicationKeyId", password="applicationKey"),
    )
    try:
        wagon.store(Path("target/app-1.0.jar"), "com/example/app/1.0/app-1.0.jar")
    finally:
        wagon.disconnect()

The remote location is read from ``repository.url`` on every call, so a host
that repoints the same adapter at another repository without reconnecting
gets the new location. Only the scheme is fixed per connection because it
selects the endpoint the client talks to.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional, Set, Union

from botocore.exceptions import BotoCoreError, ClientError

from .cache import BucketIdentityCache
from .client import build_client, error_code, is_not_found, probe_bucket
from .config import DEFAULT_CONFIG, WagonConfig
from .content_types import guess_content_type
from .events import SessionEventSupport, TransferEventSupport
from .exceptions import (
    AuthError,
    NotFoundError,
    RepositoryConnectionError,
    TransferError,
    WagonError,
)
from .interfaces import SessionListener, TransferListener
from .location import RemoteLocation, parse_repository_url
from .models import (
    AuthenticationInfo,
    BucketIdentity,
    RemoteFile,
    Repository,
    RequestType,
    Resource,
    SessionEventType,
    TransferEventType,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
ClientFactory = Callable[[RemoteLocation, AuthenticationInfo, WagonConfig], Any]


class BucketWagon:
    """Moves build artifacts between local files and a bucket.

    The adapter owns its client from ``connect`` until ``disconnect``. The
    bucket identity cache may be shared between adapters; pass the same
    ``BucketIdentityCache`` to each of them.
    """

    def __init__(
        self,
        config: Optional[WagonConfig] = None,
        bucket_cache: Optional[BucketIdentityCache] = None,
        client_factory: ClientFactory = build_client,
    ) -> None:
        self._config = config or DEFAULT_CONFIG
        self._bucket_cache = bucket_cache if bucket_cache is not None else BucketIdentityCache()
        self._client_factory = client_factory
        self._transfer_events = TransferEventSupport()
        self._session_events = SessionEventSupport()

        self._client: Any = None
        self._scheme: Optional[str] = None
        self._repository: Optional[Repository] = None
        self._buckets_used: Set[str] = set()

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def repository(self) -> Optional[Repository]:
        return self._repository

    # Listeners

    def add_transfer_listener(self, listener: TransferListener) -> None:
        self._transfer_events.add(listener)

    def remove_transfer_listener(self, listener: TransferListener) -> None:
        self._transfer_events.remove(listener)

    def has_transfer_listener(self, listener: TransferListener) -> bool:
        return self._transfer_events.has(listener)

    def add_session_listener(self, listener: SessionListener) -> None:
        self._session_events.add(listener)

    def remove_session_listener(self, listener: SessionListener) -> None:
        self._session_events.remove(listener)

    # Connection lifecycle

    def connect(self, repository: Repository, authentication_info: Optional[AuthenticationInfo] = None) -> None:
        """Open a session against ``repository``.

        Raises:
            AuthError: credentials are missing, or rejected by the bucket probe.
            ConfigurationError: the repository URL is malformed.
            RepositoryConnectionError: the bucket cannot be confirmed to exist.
        """
        if self.is_connected:
            self.disconnect()

        credentials = authentication_info or AuthenticationInfo()
        if not credentials.is_complete:
            raise AuthError(
                "Bucket credentials not provided. Configure the key id as username "
                "and the application key as password for repository "
                f"{repository.id!r}.",
                details={"repository": repository.id},
            )
        location = parse_repository_url(repository.url)

        self._session_events.fire(SessionEventType.OPENING, repository)
        try:
            client = self._client_factory(location, credentials, self._config)
        except (BotoCoreError, ValueError) as exc:
            raise RepositoryConnectionError(f"Failed to create client for {repository.url}: {exc}") from exc

        try:
            identity = probe_bucket(client, location.bucket)
        except WagonError:
            self._close_client(client)
            raise

        self._bucket_cache.put(identity)
        self._client = client
        self._scheme = location.scheme
        self._repository = repository
        self._buckets_used = {location.bucket}
        logger.info(
            "Connected to repository %s (bucket=%s, prefix=%r)",
            repository.id,
            location.bucket,
            location.base_path,
        )
        self._session_events.fire(SessionEventType.OPENED, repository)

    def disconnect(self) -> None:
        """Release the client and forget cached bucket identities. Never raises."""
        repository = self._repository
        if repository is None and self._client is None:
            return
        try:
            if repository is not None:
                self._notify_session(SessionEventType.DISCONNECTING, repository)
        finally:
            client, self._client = self._client, None
            buckets, self._buckets_used = self._buckets_used, set()
            self._scheme = None
            self._repository = None
            if client is not None:
                self._close_client(client)
            for bucket in buckets:
                self._bucket_cache.invalidate(bucket)

        if repository is not None:
            logger.info("Disconnected from repository %s", repository.id)
            self._notify_session(SessionEventType.DISCONNECTED, repository)

    def __enter__(self) -> "BucketWagon":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    # Transfers

    def fetch(self, resource_name: str, destination: PathLike) -> None:
        """Download ``resource_name`` to ``destination``.

        Raises:
            NotFoundError: the remote key does not exist.
            TransferError: any other download or local I/O failure.
        """
        location = self._current_location()
        destination = Path(destination)
        resource = Resource(resource_name)

        self._fire(TransferEventType.INITIATED, RequestType.GET, resource, destination)
        self._fire(TransferEventType.STARTED, RequestType.GET, resource, destination)
        with self._error_reporting(RequestType.GET, resource, destination):
            key = location.key_for(resource_name)
            resource.last_modified = self._download(location.bucket, key, destination, resource_name)
            try:
                resource.content_length = destination.stat().st_size
            except OSError as exc:
                raise TransferError(f"IO error downloading resource: {resource_name}") from exc
        self._fire(TransferEventType.COMPLETED, RequestType.GET, resource, destination)

    def fetch_if_newer(self, resource_name: str, destination: PathLike, timestamp: int) -> bool:
        """Download ``resource_name`` only if it was uploaded after ``timestamp``.

        ``timestamp`` is in epoch milliseconds. Returns True when a download
        happened. A lookup failure other than not-found is treated as "stale"
        and triggers a download unless ``assume_stale_on_lookup_error`` is off.
        """
        try:
            remote = self.get_remote_file(resource_name)
        except TransferError as exc:
            if not self._config.assume_stale_on_lookup_error:
                raise
            logger.warning(
                "Could not determine upload time of %s, downloading it anyway: %s",
                resource_name,
                exc,
            )
            self.fetch(resource_name, destination)
            return True

        if remote.upload_timestamp > timestamp:
            self.fetch(resource_name, destination)
            return True
        logger.debug(
            "Skipping %s: remote upload time %d is not newer than %d",
            resource_name,
            remote.upload_timestamp,
            timestamp,
        )
        return False

    def store(self, source: PathLike, resource_name: str) -> None:
        """Upload ``source`` as ``resource_name``.

        Raises:
            TransferError: the upload failed or ``source`` cannot be read.
        """
        location = self._current_location()
        source = Path(source)
        resource = Resource(resource_name)

        self._fire(TransferEventType.INITIATED, RequestType.PUT, resource, source)
        self._fire(TransferEventType.STARTED, RequestType.PUT, resource, source)
        with self._error_reporting(RequestType.PUT, resource, source):
            key = location.key_for(resource_name)
            content_type = guess_content_type(key)
            identity = self._upload_identity(location)
            try:
                with source.open("rb") as body:
                    self._client.put_object(
                        Bucket=identity.name,
                        Key=key,
                        Body=body,
                        ContentType=content_type,
                    )
                resource.content_length = source.stat().st_size
            except ClientError as exc:
                raise TransferError(
                    f"Error uploading resource: {resource_name}",
                    details={"key": key, "code": error_code(exc)},
                ) from exc
            except (BotoCoreError, OSError) as exc:
                raise TransferError(f"Error uploading resource: {resource_name}", details={"key": key}) from exc
            logger.debug("Uploaded %s to %s/%s as %s", source, identity.name, key, content_type)
        self._fire(TransferEventType.COMPLETED, RequestType.PUT, resource, source)

    def exists(self, resource_name: str) -> bool:
        try:
            self.get_remote_file(resource_name)
        except NotFoundError:
            return False
        return True

    def get_remote_file(self, resource_name: str) -> RemoteFile:
        """Look up metadata for ``resource_name``.

        Raises:
            NotFoundError: the remote key does not exist.
            TransferError: the lookup failed for any other reason.
        """
        location = self._current_location()
        key = location.key_for(resource_name)
        try:
            response = self._client.head_object(Bucket=location.bucket, Key=key)
        except ClientError as exc:
            if is_not_found(exc):
                raise NotFoundError(f"Resource not found: {resource_name}", details={"key": key}) from exc
            raise TransferError(f"Error checking if resource exists: {resource_name}", details={"key": key}) from exc
        except BotoCoreError as exc:
            raise TransferError(f"Error checking if resource exists: {resource_name}", details={"key": key}) from exc

        last_modified = response.get("LastModified")
        return RemoteFile(
            key=key,
            upload_timestamp=int(last_modified.timestamp() * 1000) if last_modified else 0,
            content_length=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
        )

    # Internals

    def _current_location(self) -> RemoteLocation:
        if self._client is None or self._repository is None:
            raise RepositoryConnectionError("Not connected. Call connect() before transferring resources.")
        location = parse_repository_url(self._repository.url)
        if location.scheme != self._scheme:
            raise RepositoryConnectionError(
                f"Repository {self._repository.id} now points at a {location.scheme}:// URL; reconnect required",
                details={"url": self._repository.url},
            )
        return location

    def _upload_identity(self, location: RemoteLocation) -> BucketIdentity:
        self._buckets_used.add(location.bucket)
        try:
            return self._bucket_cache.get_or_load(location.bucket, lambda bucket: probe_bucket(self._client, bucket))
        except (AuthError, RepositoryConnectionError) as exc:
            raise TransferError(f"Failed to resolve bucket {location.bucket}: {exc.message}") from exc

    def _download(self, bucket: str, key: str, destination: Path, resource_name: str) -> Optional[int]:
        """Stream ``key`` into a temp file beside ``destination`` and move it into place.

        Returns the object's upload time in epoch milliseconds, if reported.
        """
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(prefix="bucket-wagon-", suffix=".tmp", dir=destination.parent)
            os.close(fd)
        except OSError as exc:
            raise TransferError(f"IO error downloading resource: {resource_name}") from exc

        temp_path = Path(temp_name)
        try:
            try:
                response = self._client.get_object(Bucket=bucket, Key=key)
                body = response["Body"]
                try:
                    with temp_path.open("wb") as out:
                        shutil.copyfileobj(body, out)
                finally:
                    body.close()
            except ClientError as exc:
                if is_not_found(exc):
                    raise NotFoundError(f"Resource not found: {resource_name}", details={"key": key}) from exc
                raise TransferError(f"Error downloading resource: {resource_name}", details={"key": key}) from exc
            except (BotoCoreError, OSError) as exc:
                raise TransferError(f"Error downloading resource: {resource_name}", details={"key": key}) from exc

            try:
                self._move(temp_path, destination)
            except OSError as exc:
                raise TransferError(f"IO error downloading resource: {resource_name}") from exc
        finally:
            self._discard(temp_path)

        last_modified = response.get("LastModified")
        return int(last_modified.timestamp() * 1000) if last_modified else None

    @staticmethod
    def _move(source: Path, destination: Path) -> None:
        try:
            os.replace(source, destination)
        except OSError as exc:
            logger.debug("Rename %s -> %s failed (%s), copying instead", source, destination, exc)
            shutil.copyfile(source, destination)
            source.unlink()

    @staticmethod
    def _discard(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove temporary file %s: %s", path, exc)

    @staticmethod
    def _close_client(client: Any) -> None:
        close = getattr(client, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception as exc:
            logger.warning("Error while closing client: %s", exc)

    def _notify_session(self, event_type: SessionEventType, repository: Repository) -> None:
        try:
            self._session_events.fire(event_type, repository)
        except Exception as exc:
            logger.warning("Session listener failed on %s: %s", event_type.value, exc)

    def _fire(
        self,
        event_type: TransferEventType,
        request_type: RequestType,
        resource: Resource,
        local_file: Path,
        exception: Optional[BaseException] = None,
    ) -> None:
        self._transfer_events.fire(event_type, request_type, resource, local_file, exception)

    @contextmanager
    def _error_reporting(self, request_type: RequestType, resource: Resource, local_file: Path) -> Iterator[None]:
        try:
            yield
        except WagonError as exc:
            self._fire(TransferEventType.ERROR, request_type, resource, local_file, exc)
            raise
