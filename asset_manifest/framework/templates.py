"""Locate bundler content hashes inside generated filenames.

A naming template such as ``[dir]/[name]-[hash]`` is parsed into tagged
segments. The final path component of the template is compiled into a regular
expression over the basename of a concrete output path, so the hash can be
found (and removed) without knowing what the bundler hashed.

Hashes are runs of the bundler's base32 alphabet (``A-Z`` and digits), which
keeps lowercase stems and hashes apart when no separator sits between them.
"""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from typing import Literal

from asset_manifest.errors import UnsupportedTemplateError

logger = logging.getLogger(__name__)

SegmentKind = Literal["literal", "dir", "name", "hash", "ext"]

DEFAULT_HASH_LENGTH = 8
HASH_ALPHABET = "A-Z0-9"

_PLACEHOLDER_RE = re.compile(r"\[(dir|name|hash|ext)\]")


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    text: str = ""


@dataclass(frozen=True)
class HashSpan:
    """Offsets of the hash inside a filename (``filename[start:end]``)."""

    start: int
    end: int

    def extract(self, filename: str) -> str:
        return filename[self.start : self.end]


def parse_template(template: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    position = 0
    for match in _PLACEHOLDER_RE.finditer(template):
        if match.start() > position:
            segments.append(Segment("literal", template[position : match.start()]))
        segments.append(Segment(match.group(1)))  # type: ignore[arg-type]
        position = match.end()
    if position < len(template):
        segments.append(Segment("literal", template[position:]))
    return tuple(segments)


def _is_separator(char: str) -> bool:
    return not char.isalnum()


def _final_component(segments: tuple[Segment, ...]) -> tuple[Segment, ...]:
    """Segments after the last literal ``/`` of the template."""

    tail: list[Segment] = []
    for segment in reversed(segments):
        if segment.kind == "literal" and "/" in segment.text:
            remainder = segment.text.rsplit("/", 1)[1]
            if remainder:
                tail.append(Segment("literal", remainder))
            break
        if segment.kind == "dir":
            break
        tail.append(segment)
    return tuple(reversed(tail))


class NameTemplateMatcher:
    """Find the hash a naming template placed in a generated filename."""

    def __init__(self, template: str, *, hash_length: int | None = DEFAULT_HASH_LENGTH) -> None:
        if not isinstance(template, str) or not template.strip():
            raise UnsupportedTemplateError("Naming template must be a non-empty string")
        if hash_length is not None and hash_length < 1:
            raise UnsupportedTemplateError(f"hash_length must be >= 1 (got {hash_length})")

        self.template = template
        self.hash_length = hash_length
        self.segments = parse_template(template)

        hash_count = sum(1 for segment in self.segments if segment.kind == "hash")
        if hash_count > 1:
            raise UnsupportedTemplateError(
                f"Naming template {template!r} contains more than one [hash] placeholder"
            )

        self._component = _final_component(self.segments)
        self._hash_index: int | None = None
        for index, segment in enumerate(self._component):
            if segment.kind == "hash":
                self._hash_index = index

        if hash_count and self._hash_index is None:
            raise UnsupportedTemplateError(
                f"Naming template {template!r} places [hash] in a directory component"
            )

        self._check_supported()
        self._pattern = re.compile(self._build_pattern()) if self.has_hash else None

    @property
    def has_hash(self) -> bool:
        return self._hash_index is not None

    def _neighbour(self, offset: int) -> Segment | None:
        if self._hash_index is None:
            return None
        index = self._hash_index + offset
        if 0 <= index < len(self._component):
            return self._component[index]
        return None

    def _check_supported(self) -> None:
        before = self._neighbour(-1)
        if before is None or before.kind != "literal":
            return
        last = before.text[-1]
        # Known gap: an uppercase prefix shares the hash alphabet, so the boundary is ambiguous.
        if last.isalpha() and last.isupper():
            raise UnsupportedTemplateError(
                f"Naming template {self.template!r} puts [hash] directly after the uppercase "
                f"literal {before.text!r}; add a separator such as '-' before [hash]"
            )

    def _build_pattern(self) -> str:
        if self.hash_length is None:
            hash_pattern = f"[{HASH_ALPHABET}]+"
        else:
            hash_pattern = f"[{HASH_ALPHABET}]{{{self.hash_length}}}"

        parts: list[str] = []
        for index, segment in enumerate(self._component):
            if segment.kind == "literal":
                parts.append(re.escape(segment.text))
            elif segment.kind == "hash":
                parts.append(f"(?P<hash>{hash_pattern})")
            elif index < self._hash_index:
                # Greedy, so the rightmost run that fits the template is the hash.
                parts.append("[^/]*")
            else:
                parts.append("[^/]*?")
        # Output extensions (".js", ".min.js", ".js.map") follow the template.
        return "".join(parts) + r"(?:\.[^/]*)?$"

    def locate(self, filename: str) -> HashSpan | None:
        """Return the span of the hash in `filename`, or None if there is none."""

        if self._pattern is None:
            return None
        base_offset = len(filename) - len(posixpath.basename(filename))
        match = self._pattern.match(filename, base_offset)
        if match is None:
            return None
        start, end = match.span("hash")
        return HashSpan(start, end)

    def removal_span(self, filename: str) -> HashSpan | None:
        """The hash span widened by one adjacent separator character."""

        span = self.locate(filename)
        if span is None:
            return None

        start, end = span.start, span.end
        before = self._neighbour(-1)
        after = self._neighbour(1)
        if before is not None and before.kind == "literal" and _is_separator(before.text[-1]):
            start -= 1
        elif after is not None and after.kind == "literal" and _is_separator(after.text[0]):
            end += 1
        return HashSpan(start, end)

    def strip(self, filename: str) -> str:
        """Return `filename` with its hash (and one separator) removed."""

        span = self.removal_span(filename)
        if span is None:
            return filename
        stripped = filename[: span.start] + filename[span.end :]
        logger.debug("Stripped hash from %s -> %s (template=%s)", filename, stripped, self.template)
        return stripped
