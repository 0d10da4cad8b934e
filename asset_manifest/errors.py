"""Exception hierarchy for manifest generation."""

from __future__ import annotations


class ManifestError(Exception):
    """Base class for every failure raised while producing a manifest."""


class ConfigurationError(ManifestError, ValueError):
    """Invalid option values or an unresolvable manifest destination."""


class IncompatibleOptionsError(ConfigurationError):
    """Two options that are valid on their own cannot be combined."""


class UnsupportedTemplateError(ConfigurationError):
    """A naming template shape the hash matcher refuses to interpret."""


class ManifestKeyConflictError(ManifestError):
    """Two distinct outputs resolved to the same manifest key."""

    def __init__(self, key: str, existing: str, incoming: str) -> None:
        self.key = key
        self.existing = existing
        self.incoming = incoming
        super().__init__(
            f"There is a conflicting manifest key for {key!r}: {existing} and {incoming}"
        )


class ManifestLockTimeoutError(ManifestError, TimeoutError):
    """The manifest lock could not be acquired within the bounded wait."""
