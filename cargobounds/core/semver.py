"""Semantic versions and Cargo version requirements.

Requirement syntax and matching follow Cargo's rules:

- ``1.2.3`` / ``^1.2.3``  caret: ``>=1.2.3, <2.0.0`` (``^0.2.3`` → ``<0.3.0``,
  ``^0.0.3`` → ``=0.0.3``)
- ``~1.2.3``              tilde: ``>=1.2.3, <1.3.0``
- ``1.*`` / ``1.2.*`` / ``*``  wildcards
- ``=``, ``>``, ``>=``, ``<``, ``<=`` with full or partial versions
- comparators joined with ``,`` must all match
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

from cargobounds.models.versioning import Version, prerelease_key

_IDENT = r"[0-9A-Za-z-]+"
_NUM = r"0|[1-9]\d*"

_VERSION_RE = re.compile(
    rf"^(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM})"
    rf"(?:-(?P<pre>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+(?P<build>{_IDENT}(?:\.{_IDENT})*))?$"
)

_COMPARATOR_RE = re.compile(
    rf"^(?P<op>>=|<=|=|>|<|~|\^)?\s*"
    rf"(?P<major>{_NUM}|[*xX])"
    rf"(?:\.(?P<minor>{_NUM}|[*xX]))?"
    rf"(?:\.(?P<patch>{_NUM}|[*xX]))?"
    rf"(?:-(?P<pre>{_IDENT}(?:\.{_IDENT})*))?"
    rf"(?:\+{_IDENT}(?:\.{_IDENT})*)?$"
)

_WILDCARDS = frozenset("*xX")


class VersionParseError(ValueError):
    """Raised when a string is not a valid semantic version."""


class RequirementParseError(ValueError):
    """Raised when a string is not a valid Cargo version requirement."""


def parse_version(text: str) -> Version:
    """Parse ``MAJOR.MINOR.PATCH[-PRE][+BUILD]`` into a :class:`Version`."""
    match = _VERSION_RE.match(text.strip())
    if match is None:
        raise VersionParseError(f"invalid semantic version: {text!r}")
    pre = match.group("pre")
    for ident in pre.split(".") if pre else ():
        if ident.isdigit() and len(ident) > 1 and ident.startswith("0"):
            raise VersionParseError(f"invalid semantic version: {text!r}")
    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        pre=tuple(pre.split(".")) if pre else (),
        build=match.group("build") or "",
    )


class Op(str, Enum):
    EXACT = "="
    GREATER = ">"
    GREATER_EQ = ">="
    LESS = "<"
    LESS_EQ = "<="
    TILDE = "~"
    CARET = "^"
    WILDCARD = "*"


class Comparator(BaseModel):
    """One ``op version`` term; ``minor``/``patch`` are None when omitted."""

    model_config = ConfigDict(frozen=True)

    op: Op
    major: int
    minor: int | None = None
    patch: int | None = None
    pre: tuple[str, ...] = ()

    def matches(self, version: Version) -> bool:
        if self.op is Op.EXACT or self.op is Op.WILDCARD:
            return self._exact(version)
        if self.op is Op.GREATER:
            return self._greater(version)
        if self.op is Op.GREATER_EQ:
            return self._exact(version) or self._greater(version)
        if self.op is Op.LESS:
            return self._less(version)
        if self.op is Op.LESS_EQ:
            return self._exact(version) or self._less(version)
        if self.op is Op.TILDE:
            return self._tilde(version)
        return self._caret(version)

    def _pre_ge(self, version: Version) -> bool:
        return prerelease_key(version.pre) >= prerelease_key(self.pre)

    def _exact(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if v.minor != self.minor:
            return False
        if self.patch is None:
            return True
        return v.patch == self.patch and prerelease_key(v.pre) == prerelease_key(self.pre)

    def _greater(self, v: Version) -> bool:
        if v.major != self.major:
            return v.major > self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor > self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch > self.patch
        return prerelease_key(v.pre) > prerelease_key(self.pre)

    def _less(self, v: Version) -> bool:
        if v.major != self.major:
            return v.major < self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor < self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch < self.patch
        return prerelease_key(v.pre) < prerelease_key(self.pre)

    def _tilde(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is not None and v.minor != self.minor:
            return False
        if self.patch is not None and v.patch != self.patch:
            return v.patch > self.patch
        return self._pre_ge(v)

    def _caret(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return v.minor >= self.minor
            return v.minor == self.minor
        if self.major > 0:
            if v.minor != self.minor:
                return v.minor > self.minor
            if v.patch != self.patch:
                return v.patch > self.patch
        elif self.minor > 0:
            if v.minor != self.minor:
                return False
            if v.patch != self.patch:
                return v.patch > self.patch
        elif v.minor != self.minor or v.patch != self.patch:
            return False
        return self._pre_ge(v)

    def __str__(self) -> str:
        parts = [str(self.major)]
        if self.minor is not None:
            parts.append(str(self.minor))
        elif self.op is Op.WILDCARD:
            parts.append("*")
        if self.patch is not None:
            parts.append(str(self.patch))
        elif self.op is Op.WILDCARD and self.minor is not None:
            parts.append("*")
        text = ".".join(parts)
        if self.pre:
            text += "-" + ".".join(self.pre)
        if self.op is Op.WILDCARD:
            return text
        return f"{self.op.value}{text}"


def _parse_comparator(text: str, source: str) -> Comparator:
    match = _COMPARATOR_RE.match(text)
    if match is None:
        raise RequirementParseError(f"invalid version requirement: {source!r}")
    op_text = match.group("op")
    pieces = [match.group("major"), match.group("minor"), match.group("patch")]

    numbers: list[int | None] = []
    wildcard = False
    for piece in pieces:
        if piece is None or piece in _WILDCARDS:
            wildcard = wildcard or piece is not None
            numbers.append(None)
            continue
        if wildcard:
            raise RequirementParseError(
                f"unexpected version component after wildcard: {source!r}"
            )
        numbers.append(int(piece))

    pre = tuple(match.group("pre").split(".")) if match.group("pre") else ()
    if pre and numbers[2] is None:
        raise RequirementParseError(
            f"pre-release requires a full version: {source!r}"
        )

    if wildcard:
        if op_text not in (None, "="):
            raise RequirementParseError(
                f"wildcard cannot follow an operator: {source!r}"
            )
        if numbers[0] is None:
            raise RequirementParseError(f"bare wildcard must stand alone: {source!r}")
        op = Op.WILDCARD
    else:
        op = Op(op_text) if op_text else Op.CARET

    return Comparator(op=op, major=numbers[0], minor=numbers[1], patch=numbers[2], pre=pre)


class VersionReq:
    """A parsed Cargo version requirement.

    The original text is kept so reports show the bound exactly as it was
    declared in the manifest.
    """

    def __init__(self, text: str, comparators: tuple[Comparator, ...]) -> None:
        self.text = text
        self.comparators = comparators

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        stripped = text.strip()
        if stripped in ("*", "x", "X"):
            return cls(stripped, ())
        if not stripped:
            raise RequirementParseError("empty version requirement")
        comparators = tuple(
            _parse_comparator(part.strip(), text) for part in stripped.split(",")
        )
        return cls(stripped, comparators)

    def matches(self, version: Version) -> bool:
        if not all(c.matches(version) for c in self.comparators):
            return False
        if not version.is_prerelease:
            return True
        # A pre-release only matches when a comparator names the same
        # major.minor.patch with a pre-release of its own.
        return any(
            c.pre
            and (c.major, c.minor, c.patch) == (version.major, version.minor, version.patch)
            for c in self.comparators
        )

    def __str__(self) -> str:
        if not self.comparators:
            return "*"
        return ", ".join(str(c) for c in self.comparators)

    def __repr__(self) -> str:
        return f"VersionReq({self.text!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionReq):
            return NotImplemented
        return self.comparators == other.comparators

    def __hash__(self) -> int:
        return hash(self.comparators)
