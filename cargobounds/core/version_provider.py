"""Registry access — the published versions of a dependency.

The engines only need ``list_versions(name)``; ``CratesIoClient`` is the
default implementation, talking to the crates.io API over httpx.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import httpx

from cargobounds.config import config
from cargobounds.core.semver import parse_version
from cargobounds.models.versioning import PublishedVersion, Version

logger = logging.getLogger(__name__)


class VersionFetchError(RuntimeError):
    """Raised when the registry cannot provide a dependency's versions."""


@runtime_checkable
class VersionProvider(Protocol):
    """Protocol for version listings.

    Any object with a ``list_versions(name) -> list[PublishedVersion]``
    method satisfies this protocol.
    """

    def list_versions(self, name: str) -> list[PublishedVersion]:
        ...


class CratesIoClient:
    """Synchronous crates.io client.

    Requests are spaced at least *request_interval* seconds apart, as the
    crates.io crawler policy asks.

    Parameters
    ----------
    client:
        An ``httpx.Client`` to use instead of a fresh one (tests pass one
        with a mock transport).
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        api_url: str | None = None,
        user_agent: str | None = None,
        request_interval: float | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_url = (api_url or config.crates_io_api).rstrip("/")
        self._interval = (
            config.request_interval if request_interval is None else request_interval
        )
        self._client = client or httpx.Client(
            timeout=timeout or config.http_timeout,
            headers={"User-Agent": user_agent or config.user_agent},
        )
        self._last_request: float | None = None

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> CratesIoClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _throttle(self) -> None:
        if self._last_request is not None:
            wait = self._interval - (time.monotonic() - self._last_request)
            if wait > 0:
                time.sleep(wait)
        self._last_request = time.monotonic()

    def list_versions(self, name: str) -> list[PublishedVersion]:
        self._throttle()
        url = f"{self._api_url}/crates/{name}"
        logger.debug("GET %s", url)
        try:
            resp = self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise VersionFetchError(
                f"crates.io returned {exc.response.status_code} for {name!r}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise VersionFetchError(f"cannot fetch versions of {name!r}: {exc}") from exc

        entries = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise VersionFetchError(f"crates.io response for {name!r} has no versions")
        try:
            return [
                PublishedVersion(num=entry["num"], yanked=bool(entry.get("yanked", False)))
                for entry in entries
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise VersionFetchError(
                f"malformed crates.io version entry for {name!r}: {exc}"
            ) from exc


def usable_versions(published: Iterable[PublishedVersion]) -> list[Version]:
    """Parse the non-yanked entries and drop pre-releases, sorted ascending.

    Raises ``VersionParseError`` if a non-yanked entry is not valid semver.
    """
    versions: set[Version] = set()
    for entry in published:
        if entry.yanked:
            continue
        version = parse_version(entry.num)
        if not version.is_prerelease:
            versions.add(version)
    return sorted(versions)


def fetch_versions(provider: VersionProvider, name: str) -> list[Version]:
    """All released, non-yanked, non-pre-release versions of *name*, ascending."""
    versions = usable_versions(provider.list_versions(name))
    logger.info("Fetched %d usable versions of %s", len(versions), name)
    return versions
