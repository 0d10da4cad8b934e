import base64
import hashlib

import pytest

from asset_manifest.framework.build import BuildOutput
from asset_manifest.framework.hashing import ContentHasher, compute_digest


def test_compute_digest_produces_md5_etag_and_sha384_integrity():
    data = b"console.log('example');\n"

    digest = compute_digest(data)

    assert digest.etag == hashlib.md5(data).hexdigest()
    assert len(digest.etag) == 32
    assert digest.etag == digest.etag.lower()
    assert digest.integrity == "sha384-" + base64.b64encode(hashlib.sha384(data).digest()).decode("ascii")


def test_hasher_memoizes_by_output_path():
    calls: list[str] = []

    def reader(path: str) -> bytes:
        calls.append(path)
        return b"body { color: red; }\n"

    hasher = ContentHasher(reader=reader)
    output = BuildOutput(path="dist/example.css")

    first = hasher.digest(output)
    second = hasher.digest(BuildOutput(path="dist/example.css"))

    assert first == second
    assert calls == ["dist/example.css"]
    assert len(hasher) == 1


def test_hasher_prefers_in_memory_contents(tmp_path):
    on_disk = tmp_path / "example.js"
    on_disk.write_bytes(b"disk")
    hasher = ContentHasher()

    digest = hasher.digest(BuildOutput(path=str(on_disk), contents=b"memory"))

    assert digest.etag == hashlib.md5(b"memory").hexdigest()


def test_hasher_reads_missing_contents_from_disk(tmp_path):
    on_disk = tmp_path / "example.js"
    on_disk.write_bytes(b"disk")

    digest = ContentHasher().digest(BuildOutput(path=str(on_disk)))

    assert digest.etag == hashlib.md5(b"disk").hexdigest()


def test_hasher_propagates_read_failures(tmp_path):
    with pytest.raises(FileNotFoundError):
        ContentHasher().digest(BuildOutput(path=str(tmp_path / "missing.js")))


def test_separate_hashers_do_not_share_cache():
    first = ContentHasher(reader=lambda _path: b"one")
    second = ContentHasher(reader=lambda _path: b"two")
    output = BuildOutput(path="dist/app.js")

    assert first.digest(output) != second.digest(output)
