from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator

from asset_manifest.errors import ManifestError, ManifestLockTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TIMEOUT_SECONDS = 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.05


def utc_now_iso8601() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


@contextmanager
def manifest_lock(
    manifest_path: str | os.PathLike[str],
    *,
    timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
) -> Iterator[str]:
    """Hold `<manifest>.lock` exclusively across processes for the duration of the block."""

    lock_path = f"{os.fspath(manifest_path)}.lock"
    start = time.monotonic()
    os.makedirs(os.path.dirname(os.path.abspath(lock_path)), exist_ok=True)

    while True:
        try:
            fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            with os.fdopen(fd, "w", encoding="utf-8") as file:
                file.write(f"pid={os.getpid()}\ncreated_at={utc_now_iso8601()}\n")
            break
        except FileExistsError:
            if (time.monotonic() - start) >= timeout_seconds:
                raise ManifestLockTimeoutError(f"Timed out waiting for manifest lock: {lock_path}")
            time.sleep(poll_interval_seconds)

    try:
        yield lock_path
    finally:
        try:
            os.remove(lock_path)
        except FileNotFoundError:
            pass


def serialize_manifest(payload: Any) -> str:
    try:
        return json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
    except (TypeError, ValueError) as exc:
        raise ManifestError(f"Manifest payload is not JSON serializable: {exc}") from exc


def read_manifest(manifest_path: str | os.PathLike[str]) -> dict[str, Any]:
    path = Path(manifest_path)
    if not path.exists() or path.stat().st_size == 0:
        return {}

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Existing manifest is not valid JSON: {path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ManifestError(f"Existing manifest must contain a JSON object: {path}")
    return dict(payload)


def merge_manifest(existing: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Incoming keys win; existing keys keep their position, new keys are appended."""

    merged = dict(existing)
    merged.update(incoming)
    return merged


def _atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        newline="",
        delete=False,
        dir=str(path.parent),
        prefix=path.name + ".",
        suffix=".tmp",
    ) as handle:
        temp_path = Path(handle.name)
        try:
            handle.write(content)
        except BaseException:
            handle.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


class ManifestStore:
    """Load, merge and atomically persist one manifest file."""

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.path = Path(path)
        self.lock_timeout_seconds = lock_timeout_seconds
        self.poll_interval_seconds = poll_interval_seconds

    def load(self) -> dict[str, Any]:
        return read_manifest(self.path)

    def merge(self, existing: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
        return merge_manifest(existing, incoming)

    def persist(self, payload: Any) -> str:
        text = serialize_manifest(payload)
        _atomic_write_text(self.path, text)
        return text

    def lock(self):
        return manifest_lock(
            self.path,
            timeout_seconds=self.lock_timeout_seconds,
            poll_interval_seconds=self.poll_interval_seconds,
        )

    def render(
        self,
        entries: Mapping[str, Any],
        *,
        append: bool = False,
        transform: Callable[[dict[str, Any]], Any] | None = None,
    ) -> Any:
        """Build the payload that would be written, without writing it."""

        merged = self.merge(self.load(), entries) if append else dict(entries)
        return transform(merged) if transform is not None else merged

    def update(
        self,
        entries: Mapping[str, Any],
        *,
        append: bool = False,
        transform: Callable[[dict[str, Any]], Any] | None = None,
        write: bool = True,
    ) -> str:
        """
        Run the load-merge-write cycle under the manifest lock.

        Returns the serialized manifest. With `write=False` nothing is written,
        no lock is taken and the existing file is left untouched.
        """

        if not write:
            return serialize_manifest(self.render(entries, append=append, transform=transform))

        with self.lock():
            payload = self.render(entries, append=append, transform=transform)
            text = self.persist(payload)

        logger.info("Wrote manifest %s (%d entries)", self.path, len(entries))
        return text
