"""
Package models — what the user declares and what the engine consumes.

A ``PackageDeclaration`` is the loose, user-facing shape: a name or a
list of names, a version or a list of versions.  The engine never sees
it directly.  It is normalised into a ``PackageRequest``, which always
holds positionally paired sequences (length >= 1), so nothing
downstream has to ask "is this a list?".
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from chocosync.core.errors import RequestError
from chocosync.core.models.action import PackageAction

# Lowercased package name → version (None when the listing carries none)
NameVersionMap = dict[str, str | None]

# Versions positionally aligned with a request's names
ResolvedVersions = list[str | None]


class PackageDeclaration(BaseModel):
    """A desired-state declaration for one or more packages.

    Loaded from chocosync.yml or built by the CLI.
    """

    name: str | list[str]
    version: str | list[str | None] | None = None
    options: str = ""
    source: str | None = None
    action: PackageAction = PackageAction.INSTALL

    @field_validator("version", mode="before")
    @classmethod
    def _reject_unquoted_versions(cls, value):
        # YAML reads `version: 2.10` as the float 2.1
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, (bool, int, float)):
                raise ValueError(
                    f"version {item!r} is not a string; quote versions in YAML "
                    "(e.g. version: \"2.10\")"
                )
        return value

    @property
    def names(self) -> list[str]:
        return [self.name] if isinstance(self.name, str) else list(self.name)

    @property
    def label(self) -> str:
        """Human-readable identifier for logs and reports."""
        return ", ".join(self.names)


class PackageRequest(BaseModel):
    """Immutable, positionally paired names and version pins.

    A missing pin is always ``None``, never an empty string.
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...]
    versions: tuple[str | None, ...] = Field(default=())

    @model_validator(mode="before")
    @classmethod
    def _normalise_versions(cls, data):
        if not isinstance(data, dict):
            return data
        versions = data.get("versions")
        if not versions:
            versions = (None,) * len(data.get("names") or ())
        # Empty-string pins mean "no pin"
        return {**data, "versions": tuple(v or None for v in versions)}

    @model_validator(mode="after")
    def _check_shape(self) -> PackageRequest:
        if not self.names:
            raise ValueError("a package request needs at least one name")
        if len(self.names) != len(self.versions):
            raise ValueError(
                f"names and versions differ in length "
                f"({len(self.names)} names, {len(self.versions)} versions)"
            )
        if any(not n.strip() for n in self.names):
            raise ValueError("package names must not be blank")
        return self

    # ── Construction ────────────────────────────────────────────

    @classmethod
    def single(cls, name: str, version: str | None = None) -> PackageRequest:
        """Build a one-package request."""
        return cls._build([name], [version])

    @classmethod
    def from_pairs(cls, pairs: list[tuple[str, str | None]]) -> PackageRequest:
        """Build a request from (name, version) pairs."""
        return cls._build([n for n, _ in pairs], [v for _, v in pairs])

    @classmethod
    def from_declaration(cls, declaration: PackageDeclaration) -> PackageRequest:
        """Normalise a declaration into a request.

        Scalars become one-element sequences.  A scalar version against
        a list of names is rejected: pins are positional.

        Raises:
            RequestError: If names and versions cannot be paired.
        """
        names = declaration.names
        version = declaration.version
        if version is None:
            versions: list[str | None] = [None] * len(names)
        elif isinstance(version, str):
            versions = [version]
        else:
            versions = list(version)
        return cls._build(names, versions)

    @classmethod
    def _build(cls, names: list[str], versions: list[str | None]) -> PackageRequest:
        try:
            return cls(names=tuple(names), versions=tuple(versions))
        except ValueError as e:
            raise RequestError(f"Invalid package request {names!r}: {e}") from e

    # ── Views ───────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self.names)

    def pairs(self) -> Iterator[tuple[str, str | None]]:
        return zip(self.names, self.versions)

    def pinned(self) -> list[tuple[str, str]]:
        """(name, version) pairs that carry a pin, in request order."""
        return [(n, v) for n, v in self.pairs() if v is not None]

    def unpinned(self) -> list[str]:
        """Names without a pin, in request order."""
        return [n for n, v in self.pairs() if v is None]

    @property
    def has_pins(self) -> bool:
        return any(v is not None for v in self.versions)

    def subset(self, names: list[str]) -> PackageRequest | None:
        """Narrow the request to the given names, keeping order and pins.

        Returns None when nothing is left.
        """
        keep = {n.lower() for n in names}
        pairs = [(n, v) for n, v in self.pairs() if n.lower() in keep]
        return PackageRequest.from_pairs(pairs) if pairs else None
