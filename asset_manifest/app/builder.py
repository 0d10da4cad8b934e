from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from asset_manifest.errors import ConfigurationError
from asset_manifest.framework.artifacts.manifest import ManifestStore
from asset_manifest.framework.build import BuildOptions, BuildOutput, BuildResult, OutputFile
from asset_manifest.framework.config import ManifestOptions, NamingPolicy
from asset_manifest.framework.conflicts import ConflictDetector, ManifestEntry
from asset_manifest.framework.hashing import ContentHasher
from asset_manifest.framework.keys import SOURCEMAP_SUFFIX, KeyResolver, replace_extension
from asset_manifest.framework.siblings import SiblingMatcher, base_identity
from asset_manifest.framework.templates import DEFAULT_HASH_LENGTH, NameTemplateMatcher

_module_logger = logging.getLogger(__name__)

HASHED_TEMPLATE = "[dir]/[name]-[hash]"
UNHASHED_TEMPLATE = "[dir]/[name]"


def output_directory(build_options: BuildOptions) -> str:
    if build_options.outdir:
        return build_options.outdir
    if build_options.outfile:
        return os.path.dirname(build_options.outfile) or "."
    raise ConfigurationError(
        "Unable to place the manifest: set the outdir (or outfile) build option"
    )


def resolve_manifest_path(filename: str, build_options: BuildOptions) -> str:
    return os.path.join(output_directory(build_options), filename)


def default_template(options: ManifestOptions) -> str:
    return HASHED_TEMPLATE if options.hash else UNHASHED_TEMPLATE


@dataclass(frozen=True)
class ManifestRun:
    path: str
    text: str
    written: bool


class ManifestBuilder:
    """
    Turn one finished build into a manifest.

    Options are validated and naming templates compiled at construction time,
    so configuration errors surface before any output is looked at.
    """

    def __init__(
        self,
        options: ManifestOptions | Mapping[str, Any] | None = None,
        build_options: BuildOptions | None = None,
        *,
        hash_length: int | None = DEFAULT_HASH_LENGTH,
        logger: logging.Logger | None = None,
    ) -> None:
        if options is None or isinstance(options, Mapping):
            options = ManifestOptions.from_dict(options)
        self.options = options
        self.build_options = build_options or BuildOptions()
        self.logger = logger or _module_logger

        self.policy = NamingPolicy.from_options(options)
        self.outdir = output_directory(self.build_options)
        self.manifest_path = resolve_manifest_path(options.filename, self.build_options)

        fallback = default_template(options)
        self.entry_matcher = NameTemplateMatcher(
            self.build_options.entry_names or fallback, hash_length=hash_length
        )
        self.asset_matcher = NameTemplateMatcher(
            self.build_options.asset_names or fallback, hash_length=hash_length
        )
        self.resolver = KeyResolver(self.policy, outdir=self.outdir)

    def _strip(self, path: str, *matchers: NameTemplateMatcher) -> str:
        for matcher in matchers:
            if matcher.locate(path) is not None:
                return matcher.strip(path)
        return path

    def _is_asset(self, output: BuildOutput) -> bool:
        if output.entry_point is not None or not output.inputs:
            return False
        _directory, stem = base_identity(self._strip(output.path, self.asset_matcher, self.entry_matcher))
        return any(base_identity(item)[1] == stem for item in output.inputs)

    def _identify(
        self,
        output: BuildOutput,
        by_path: Mapping[str, BuildOutput],
        siblings: SiblingMatcher,
    ) -> tuple[str, str | None]:
        """Return (hash-free source path, declared entry key) for one output."""

        strip = self.policy.strip_hash

        if output.is_sourcemap:
            base = by_path.get(output.path[: -len(SOURCEMAP_SUFFIX)])
            if base is not None:
                source, entry_key = self._identify(base, by_path, siblings)
                return (
                    source + SOURCEMAP_SUFFIX,
                    entry_key + SOURCEMAP_SUFFIX if entry_key else None,
                )

        if output.entry_point is not None:
            source = self._strip(output.path, self.entry_matcher) if strip else output.path
            return source, output.entry_point

        sibling = siblings.match(output)
        if sibling is not None and sibling.entry_point is not None:
            source = siblings.strip(output.path) if strip else output.path
            return source, replace_extension(sibling.entry_point, ".css")

        if self._is_asset(output):
            source = (
                self._strip(output.path, self.asset_matcher, self.entry_matcher)
                if strip
                else output.path
            )
            return source, None

        # Split chunks have no stable logical name; they are keyed by their hashed path.
        return output.path, None

    def collect(self, outputs: Iterable[BuildOutput]) -> dict[str, dict[str, Any]]:
        """Resolve every output into a manifest entry, rejecting key collisions."""

        all_outputs = list(outputs)
        by_path = {output.path: output for output in all_outputs}
        siblings = SiblingMatcher(self.entry_matcher, self.asset_matcher)
        siblings.index(all_outputs)
        hasher = ContentHasher()
        detector = ConflictDetector()

        for output in all_outputs:
            if self.options.filter is not None and not self.options.filter(output.path):
                self.logger.debug("Filtered out %s", output.path)
                continue

            source, entry_key = self._identify(output, by_path, siblings)
            paths = self.resolver.resolve(output.path, source=source, entry_key=entry_key)
            digest = hasher.digest(output)
            detector.assign(
                paths.key,
                ManifestEntry(
                    file=paths.file,
                    source=paths.source,
                    etag=digest.etag,
                    integrity=digest.integrity,
                ),
            )
            self.logger.debug("Resolved %s -> %s", output.path, paths.key)

        return detector.entries()

    def run(self, result: BuildResult) -> ManifestRun | None:
        """Write the manifest for a finished build; failed builds are left alone."""

        if result.errors:
            self.logger.info(
                "Skipping manifest %s: build reported %d error(s)",
                self.manifest_path,
                len(result.errors),
            )
            return None

        entries = self.collect(result.outputs)
        store = ManifestStore(
            self.manifest_path, lock_timeout_seconds=self.options.lock_timeout_seconds
        )
        write = self.build_options.write
        text = store.update(
            entries,
            append=self.options.append,
            transform=self.options.generate,
            write=write,
        )

        if not write:
            if result.output_files is None:
                result.output_files = []
            result.output_files.append(
                OutputFile(path=os.path.abspath(self.manifest_path), contents=text.encode("utf-8"))
            )

        return ManifestRun(
            path=posixpath.normpath(self.manifest_path.replace("\\", "/")),
            text=text,
            written=write,
        )
