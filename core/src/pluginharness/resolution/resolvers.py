from __future__ import annotations

import logging
import os
import string
import tempfile
from pathlib import Path
from urllib.parse import unquote, urlparse

import httpx

from pluginharness.contracts import Locator, OSArch
from pluginharness.errors import ResolverError

TEMPLATE_FIELDS = frozenset({"group", "group_path", "product", "version", "os", "arch"})

_DEFAULT_TIMEOUT_S = 60.0
_CHUNK_SIZE = 64 * 1024

_LOGGER = logging.getLogger("plugin_harness.resolution")


def validate_template(template: str) -> None:
    if not template or not template.strip():
        raise ValueError("resolver template must be a non-empty string")
    try:
        parsed = list(string.Formatter().parse(template))
    except ValueError as exc:
        raise ValueError(f"invalid resolver template {template!r}: {exc}") from exc
    unknown = sorted(
        {field for _, field, _, _ in parsed if field is not None and field not in TEMPLATE_FIELDS}
    )
    if unknown:
        raise ValueError(
            f"resolver template {template!r} uses unknown placeholder(s) {unknown}; "
            f"supported: {sorted(TEMPLATE_FIELDS)}"
        )


class TemplateResolver:
    """
    Resolves an artifact from a location template.

    `http://` and `https://` locations are downloaded with httpx; `file://`
    URLs and plain paths are copied from the local filesystem.
    """

    def __init__(self, template: str, *, client: httpx.Client | None = None) -> None:
        validate_template(template)
        self.template = template
        self._client = client

    def location_for(self, locator: Locator, platform: OSArch) -> str:
        return self.template.format(
            group=locator.group,
            group_path=locator.group_path,
            product=locator.product,
            version=locator.version,
            os=platform.os,
            arch=platform.arch,
        )

    def resolve(self, locator: Locator, platform: OSArch, dest: Path) -> None:
        location = self.location_for(locator, platform)
        scheme = urlparse(location).scheme.lower()
        dest.parent.mkdir(parents=True, exist_ok=True)
        if scheme in {"http", "https"}:
            _LOGGER.info("Downloading %s from %s", locator, location)
            self._download(location, dest)
            return
        if scheme == "file":
            source = Path(unquote(urlparse(location).path))
        else:
            source = Path(location).expanduser()
        _LOGGER.info("Copying %s from %s", locator, source)
        self._copy(source, dest)

    def _download(self, url: str, dest: Path) -> None:
        client = self._client or httpx.Client(follow_redirects=True, timeout=_DEFAULT_TIMEOUT_S)
        try:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                _stream_to_file(response.iter_bytes(_CHUNK_SIZE), dest)
        except (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError) as exc:
            raise ResolverError(f"failed to download {url}: {exc}") from exc
        finally:
            if self._client is None:
                client.close()

    @staticmethod
    def _copy(source: Path, dest: Path) -> None:
        if not source.is_file():
            raise ResolverError(f"{source} does not exist")
        try:
            with source.open("rb") as handle:
                _stream_to_file(iter(lambda: handle.read(_CHUNK_SIZE), b""), dest)
        except OSError as exc:
            raise ResolverError(f"failed to copy {source}: {exc}") from exc

    def __repr__(self) -> str:
        return f"TemplateResolver({self.template!r})"

    def __str__(self) -> str:
        return self.template


def parse_resolver(template: str) -> TemplateResolver:
    return TemplateResolver(template)


def _stream_to_file(chunks, dest: Path) -> None:
    with tempfile.NamedTemporaryFile("wb", dir=dest.parent, delete=False) as handle:
        temp_path = Path(handle.name)
        try:
            for chunk in chunks:
                handle.write(chunk)
        except BaseException:
            handle.close()
            temp_path.unlink(missing_ok=True)
            raise
    os.replace(temp_path, dest)
