"""External flow loading.

Resolves a subroutine ``src`` locator to a :class:`Flow`. Local paths are
read off the event loop; ``http(s)`` locators are fetched with aiohttp.

The conversation engine never calls this on its own: a loader is handed to
it, so any object with an ``async load(src) -> Flow`` method can stand in.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import aiohttp

from flowtalk.core.config import FlowtalkConfig
from flowtalk.core.errors import FlowLoadError
from flowtalk.core.flow.model import Flow

logger = logging.getLogger(__name__)


@runtime_checkable
class Loader(Protocol):
    """Anything that can turn a source locator into a flow."""

    async def load(self, src: str) -> Flow: ...


def is_remote(src: str) -> bool:
    """Whether a locator points at an HTTP(S) resource."""
    return src.startswith(("http://", "https://"))


class FlowLoader:
    """Load flow JSON from the filesystem or over HTTP.

    Args:
        config: Supplies ``base_dir`` for relative paths and ``http_timeout``.

    Example:
        >>> loader = FlowLoader(FlowtalkConfig(base_dir=Path("flows")))
        >>> flow = await loader.load("checkout.json")
        >>> flow = await loader.load("https://example.com/flows/checkout.json")
    """

    def __init__(self, config: FlowtalkConfig | None = None) -> None:
        self._config = config or FlowtalkConfig()

    @property
    def config(self) -> FlowtalkConfig:
        return self._config

    def resolve_path(self, src: str) -> Path:
        """Resolve a local locator against the configured base directory."""
        path = Path(src).expanduser()
        if not path.is_absolute():
            path = self._config.base_dir / path
        return path

    async def load(self, src: str) -> Flow:
        """Load and validate a flow.

        Raises:
            FlowLoadError: If the source cannot be read or is not JSON.
            FlowValidationError: If the JSON is not a valid flow document.
        """
        logger.debug("flow_load_start: src=%s", src)

        if is_remote(src):
            data = await self._fetch(src)
        else:
            data = await self._read(src)

        if not isinstance(data, dict):
            raise FlowLoadError(src, "document is not a JSON object")

        flow = Flow.from_dict(data)
        logger.debug(
            "flow_load_complete: src=%s, vertices=%d, edges=%d",
            src,
            len(flow.vertices),
            len(flow.edges),
        )
        return flow

    async def _read(self, src: str) -> Any:
        path = self.resolve_path(src)
        try:
            content = await asyncio.to_thread(path.read_text, "utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FlowLoadError(src, e) from e

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise FlowLoadError(src, f"invalid JSON: {e}") from e

    async def _fetch(self, url: str) -> Any:
        timeout = aiohttp.ClientTimeout(total=self._config.http_timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url) as response:
                    if response.status >= 400:
                        raise FlowLoadError(url, f"HTTP {response.status}")
                    text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FlowLoadError(url, e) from e

        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FlowLoadError(url, f"invalid JSON: {e}") from e
