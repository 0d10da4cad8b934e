from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Literal, Union

from asset_manifest.errors import ConfigurationError, IncompatibleOptionsError
from asset_manifest.foundation.config_namespace import SIDES, ConfigNamespace

Side = Literal["input", "output"]
SideOption = Union[bool, Side]

DEFAULT_MANIFEST_FILENAME = "manifest.json"
DEFAULT_LOCK_TIMEOUT_SECONDS = 60.0


def parse_side(value: Any, path: str) -> SideOption:
    """
    Strict parsing for options that cover the input side, the output side or both.

    Accepts True/False (None counts as False) or "input"/"output".
    """

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in SIDES:
        return value  # type: ignore[return-value]
    raise ConfigurationError(
        f"{path} must be a boolean or one of: {', '.join(SIDES)} (got {value!r})"
    )


def covers(option: SideOption, side: Side) -> bool:
    if option is True:
        return True
    return option == side


@dataclass(frozen=True)
class SideSelection:
    input: bool = False
    output: bool = False

    @classmethod
    def from_option(cls, option: SideOption) -> "SideSelection":
        return cls(input=covers(option, "input"), output=covers(option, "output"))


@dataclass(frozen=True)
class ManifestOptions:
    hash: bool = True
    short_names: SideOption = False
    extensionless: SideOption = False
    relative: SideOption = False
    use_entrypoint_keys: bool = False
    append: bool = False
    filename: str = DEFAULT_MANIFEST_FILENAME
    filter: Callable[[str], Any] | None = None
    generate: Callable[[dict[str, Any]], Any] | None = None
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        for name in ("hash", "use_entrypoint_keys", "append"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"manifest.{name} must be a boolean")
        for name in ("short_names", "extensionless", "relative"):
            object.__setattr__(self, name, parse_side(getattr(self, name), f"manifest.{name}"))
        if not isinstance(self.filename, str) or not self.filename.strip():
            raise ConfigurationError("manifest.filename must be a non-empty string")
        for name in ("filter", "generate"):
            hook = getattr(self, name)
            if hook is not None and not callable(hook):
                raise ConfigurationError(f"manifest.{name} must be callable")
        if isinstance(self.lock_timeout_seconds, bool) or not isinstance(
            self.lock_timeout_seconds, (int, float)
        ):
            raise ConfigurationError("manifest.lock_timeout_seconds must be a float")
        if self.lock_timeout_seconds <= 0:
            raise ConfigurationError("manifest.lock_timeout_seconds must be > 0")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None, *, path: str = "manifest") -> "ManifestOptions":
        """Parse options from a config mapping, rejecting unknown keys."""

        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"{path} must be a mapping (type={type(data).__name__})")

        ns = ConfigNamespace(dict(data), path=path)
        options = cls(
            hash=ns.get_bool("hash", default=True),
            short_names=ns.get_side("short_names"),
            extensionless=ns.get_side("extensionless"),
            relative=ns.get_side("relative"),
            use_entrypoint_keys=ns.get_bool("use_entrypoint_keys", default=False),
            append=ns.get_bool("append", default=False),
            filename=ns.get_str("filename", default=DEFAULT_MANIFEST_FILENAME),
            filter=ns.get_callable("filter"),
            generate=ns.get_callable("generate"),
            lock_timeout_seconds=ns.get_float(
                "lock_timeout_seconds", default=DEFAULT_LOCK_TIMEOUT_SECONDS, min_value=0.0
            ),
        )
        ns.assert_consumed()
        return options

    def with_overrides(self, **overrides: Any) -> "ManifestOptions":
        known = {item.name for item in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"Unknown manifest options: {', '.join(unknown)}")
        values = {item.name: getattr(self, item.name) for item in fields(self)}
        values.update(overrides)
        return ManifestOptions(**values)


@dataclass(frozen=True)
class NamingPolicy:
    """Key naming rules derived once per build from `ManifestOptions`."""

    strip_hash: bool = True
    short_names: SideSelection = SideSelection()
    extensionless: SideSelection = SideSelection()
    relative: SideSelection = SideSelection()
    use_entrypoint_keys: bool = False

    def __post_init__(self) -> None:
        # Entry points differing only by extension would collapse onto one key.
        if self.use_entrypoint_keys and self.extensionless.input:
            raise IncompatibleOptionsError(
                "The use_entrypoint_keys option cannot be combined with extensionless "
                "covering the input side; use extensionless='output' instead"
            )

    @classmethod
    def from_options(cls, options: ManifestOptions) -> "NamingPolicy":
        return cls(
            strip_hash=options.hash,
            short_names=SideSelection.from_option(options.short_names),
            extensionless=SideSelection.from_option(options.extensionless),
            relative=SideSelection.from_option(options.relative),
            use_entrypoint_keys=options.use_entrypoint_keys,
        )
