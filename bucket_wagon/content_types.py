"""Content-type inference for uploaded artifacts."""

from __future__ import annotations

import mimetypes
from typing import Dict

XML = "application/xml"
OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain"

# Build artifacts whose type must not depend on the host's mime database.
ARTIFACT_CONTENT_TYPES: Dict[str, str] = {
    ".pom": XML,
    ".xml": XML,
    ".jar": OCTET_STREAM,
    ".war": OCTET_STREAM,
    ".ear": OCTET_STREAM,
    ".sha1": TEXT_PLAIN,
    ".md5": TEXT_PLAIN,
}


def guess_content_type(name: str) -> str:
    lowered = name.lower()
    for suffix, content_type in ARTIFACT_CONTENT_TYPES.items():
        if lowered.endswith(suffix):
            return content_type
    detected, _ = mimetypes.guess_type(name, strict=False)
    return detected or OCTET_STREAM
