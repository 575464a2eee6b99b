"""Per-invocation option models for the two operating modes."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Granularity(str, Enum):
    """How finely the versions inside a bound are sampled.

    ``MAJOR`` tests one version per major line (per minor line for 0.x,
    where a minor bump is breaking). ``MINOR`` tests one version per
    (major, minor) line. ``PATCH`` tests every version.
    """

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"

    @classmethod
    def from_flags(cls, *, minor: bool, patch: bool) -> Granularity:
        if patch:
            return cls.PATCH
        if minor:
            return cls.MINOR
        return cls.MAJOR


class TestConfig(BaseModel):
    """Options for sanity-testing the declared bounds."""

    __test__ = False  # not a pytest test class

    model_config = ConfigDict(frozen=True)

    granularity: Granularity = Granularity.MAJOR
    print_skipped: bool = False
    dependency: str | None = None
    command: str | None = None


class MinimizeConfig(BaseModel):
    """Options for discovering the widest passing bound."""

    model_config = ConfigDict(frozen=True)

    dependency: str | None = None
    skip_sanity: bool = False
    strict_sanity: bool = False  # sanity anomalies count as failures
    command: str | None = None
