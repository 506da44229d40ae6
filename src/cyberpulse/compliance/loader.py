"""Crosswalk acquisition.

A crosswalk source supplies a complete crosswalk table or raises. The table is
resolved once per batch; any failure falls back to the built-in default.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import httpx
import yaml

from ..models.compliance import Crosswalk
from ..utils.sanitize import sanitize_error
from .crosswalk import DEFAULT_CROSSWALK, CrosswalkError, parse_crosswalk

DEFAULT_SOURCE = "default"


@runtime_checkable
class CrosswalkSource(Protocol):
    """Protocol that all crosswalk sources must implement."""

    name: str

    async def load(self) -> Crosswalk: ...


class HttpCrosswalkSource:
    """Fetch a JSON crosswalk over HTTP(S)."""

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 30,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.name = url
        self.url = url
        self.timeout = timeout_seconds
        self.client = client

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        response = await client.get(self.url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response

    async def load(self) -> Crosswalk:
        if self.client is not None:
            response = await self._get(self.client)
        else:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await self._get(client)

        if not response.content.strip():
            raise CrosswalkError(f"Empty crosswalk response from {self.url}")
        try:
            document = response.json()
        except ValueError as e:
            raise CrosswalkError(f"Crosswalk response from {self.url} is not JSON") from e
        return parse_crosswalk(document)


class FileCrosswalkSource:
    """Read a crosswalk from a local JSON or YAML file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.name = str(self.path)

    async def load(self) -> Crosswalk:
        if not self.path.is_file():
            raise CrosswalkError(f"Crosswalk file not found: {self.path}")
        try:
            # YAML is a superset of JSON, so one parser covers both
            document = yaml.safe_load(self.path.read_text(encoding="utf-8-sig"))
        except yaml.YAMLError as e:
            raise CrosswalkError(f"Crosswalk file {self.path} could not be parsed") from e
        return parse_crosswalk(document)


def get_crosswalk_source(
    location: Optional[str],
    timeout_seconds: float = 30,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[CrosswalkSource]:
    """Factory: pick a crosswalk source for a location, or None for the default."""
    location = (location or "").strip()
    if not location:
        return None
    if location.lower().startswith(("http://", "https://")):
        return HttpCrosswalkSource(location, timeout_seconds=timeout_seconds, client=client)
    if location.lower().startswith("file://"):
        location = location[len("file://"):]
    return FileCrosswalkSource(Path(location))


@dataclass
class CrosswalkResolution:
    crosswalk: Crosswalk
    source: str = DEFAULT_SOURCE
    error: Optional[str] = None

    @property
    def fell_back(self) -> bool:
        return self.error is not None


async def resolve_crosswalk(source: Optional[CrosswalkSource]) -> CrosswalkResolution:
    """Load the crosswalk for a batch, keeping the built-in table on any failure."""
    if source is None:
        return CrosswalkResolution(crosswalk=DEFAULT_CROSSWALK)

    try:
        crosswalk = await source.load()
    except Exception as e:
        return CrosswalkResolution(
            crosswalk=DEFAULT_CROSSWALK,
            error=sanitize_error(f"{source.name}: {e}"),
        )

    return CrosswalkResolution(crosswalk=crosswalk, source=sanitize_error(source.name))
