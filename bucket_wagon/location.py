"""Repository URL parsing.

A repository URL has the form ``scheme://bucket[/base/path]``. The bucket
becomes the target bucket and the remainder the key prefix every resource
name is appended to.
"""

from __future__ import annotations

from dataclasses import dataclass

from .exceptions import ConfigurationError

SUPPORTED_SCHEMES = ("s3", "b2")


@dataclass(frozen=True)
class RemoteLocation:
    scheme: str
    bucket: str
    base_path: str = ""

    def key_for(self, resource_name: str) -> str:
        return self.base_path + resource_name.lstrip("/")


def normalize_base_path(path: str) -> str:
    path = path.lstrip("/")
    if path and not path.endswith("/"):
        path += "/"
    return path


def parse_repository_url(url: str) -> RemoteLocation:
    if not url or "://" not in url:
        raise ConfigurationError(f"Invalid repository URL: {url!r}", details={"url": str(url)})

    scheme, remaining = url.split("://", 1)
    scheme = scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ConfigurationError(
            f"Unsupported repository scheme {scheme!r} in {url!r}; expected one of {', '.join(SUPPORTED_SCHEMES)}",
            details={"url": url},
        )

    bucket, _, path = remaining.partition("/")
    bucket = bucket.strip()
    if not bucket:
        raise ConfigurationError(f"Repository URL has an empty bucket name: {url!r}", details={"url": url})

    return RemoteLocation(scheme=scheme, bucket=bucket, base_path=normalize_base_path(path))
