from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable

from asset_manifest.framework.build import BuildOutput
from asset_manifest.framework.templates import NameTemplateMatcher

logger = logging.getLogger(__name__)

Identity = tuple[str, str]


def base_identity(stripped_path: str) -> Identity:
    """(directory, stem) of a hash-free path; the stem drops every extension."""

    directory, base = posixpath.split(stripped_path)
    dot = base.find(".", 1)
    stem = base if dot == -1 else base[:dot]
    return directory, stem


class SiblingMatcher:
    """Pair stylesheet bundles with the script entry that caused them.

    The bundler records no link between a script entry and the stylesheet it
    emitted for it, and each file carries its own hash, so both sides are
    compared by their hash-stripped directory and stem.
    """

    def __init__(
        self,
        entry_matcher: NameTemplateMatcher,
        asset_matcher: NameTemplateMatcher | None = None,
    ) -> None:
        self.entry_matcher = entry_matcher
        self.asset_matcher = asset_matcher
        self._entries: dict[Identity, BuildOutput] = {}

    def strip(self, path: str) -> str:
        """Strip with the entry template, falling back to the asset template."""

        if self.entry_matcher.locate(path) is not None:
            return self.entry_matcher.strip(path)
        if self.asset_matcher is not None and self.asset_matcher.locate(path) is not None:
            return self.asset_matcher.strip(path)
        return path

    def index(self, outputs: Iterable[BuildOutput]) -> None:
        for output in outputs:
            if output.entry_point is None or output.is_stylesheet or output.is_sourcemap:
                continue
            identity = base_identity(self.entry_matcher.strip(output.path))
            # First entry wins so pairing does not depend on later outputs.
            self._entries.setdefault(identity, output)

    def match(self, output: BuildOutput) -> BuildOutput | None:
        """Return the entry `output` was emitted for, if it is a sibling stylesheet."""

        if output.entry_point is not None or not output.is_stylesheet:
            return None
        sibling = self._entries.get(base_identity(self.strip(output.path)))
        if sibling is not None:
            logger.debug("Paired stylesheet %s with entry %s", output.path, sibling.path)
        return sibling
