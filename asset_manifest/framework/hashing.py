from __future__ import annotations

import base64
import hashlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from asset_manifest.framework.build import BuildOutput

logger = logging.getLogger(__name__)

INTEGRITY_ALGORITHM = "sha384"


@dataclass(frozen=True)
class ContentDigest:
    etag: str
    integrity: str


def compute_digest(data: bytes) -> ContentDigest:
    etag = hashlib.md5(data).hexdigest()
    digest = hashlib.new(INTEGRITY_ALGORITHM, data).digest()
    integrity = f"{INTEGRITY_ALGORITHM}-{base64.b64encode(digest).decode('ascii')}"
    return ContentDigest(etag=etag, integrity=integrity)


def _read_output_bytes(path: str) -> bytes:
    return Path(path).read_bytes()


class ContentHasher:
    """Per-build digest cache keyed by output path.

    Outputs that carry no in-memory contents are read through `reader`.
    """

    def __init__(self, reader: Callable[[str], bytes] | None = None) -> None:
        self._reader = reader or _read_output_bytes
        self._cache: dict[str, ContentDigest] = {}

    def __len__(self) -> int:
        return len(self._cache)

    def digest(self, output: BuildOutput) -> ContentDigest:
        cached = self._cache.get(output.path)
        if cached is not None:
            return cached

        data = output.contents if output.contents is not None else self._reader(output.path)
        result = compute_digest(data)
        self._cache[output.path] = result
        logger.debug("Hashed %s (%d bytes) etag=%s", output.path, len(data), result.etag)
        return result
