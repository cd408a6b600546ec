"""``http``: GET/HEAD requests and file downloads for plugins."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urlparse

import httpx
from loguru import logger
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TransferSpeedColumn,
)

from sdkfox.plugins.luai.modules import PreloadOptions

if TYPE_CHECKING:
    from sdkfox.plugins.luai.vm import LuaVM

NAVIGATOR_GLOBAL = "SDKFOX_NAVIGATOR"

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass
class HttpRequest:
    url: str | None = None
    headers: dict[str, str] | None = None


def _canonical_header(name: str) -> str:
    return "-".join(part.capitalize() for part in name.split("-"))


def _first_values(headers: httpx.Headers) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in headers.multi_items():
        out.setdefault(_canonical_header(key), value)
    return out


def _content_length(response: httpx.Response) -> int:
    try:
        return int(response.headers.get("content-length", -1))
    except ValueError:
        return -1


class HttpModule:
    name = "http"

    def __init__(self, vm: "LuaVM", options: PreloadOptions):
        self._vm = vm
        self._options = options

    def _client(self) -> httpx.Client:
        kwargs: dict[str, Any] = {"timeout": DEFAULT_TIMEOUT_SECONDS, "follow_redirects": True}
        proxy = self._options.config.proxy
        if proxy.enable and proxy.url:
            kwargs["proxy"] = proxy.url
        if self._options.http_transport is not None:
            kwargs["transport"] = self._options.http_transport
        return httpx.Client(**kwargs)

    def _headers(self, request: HttpRequest) -> dict[str, str]:
        headers = dict(request.headers or {})
        if not any(key.lower() == "user-agent" for key in headers):
            user_agent = self._user_agent()
            if user_agent:
                headers["User-Agent"] = user_agent
        return headers

    def _user_agent(self) -> str:
        navigator = self._vm.get_global(NAVIGATOR_GLOBAL)
        if navigator is not None:
            value = navigator["userAgent"]
            if isinstance(value, str) and value:
                return value
        return self._options.context.user_agent

    def get(self, request: HttpRequest) -> Any:
        if not request.url:
            return None, "url is required"
        try:
            with self._client() as client:
                response = client.get(request.url, headers=self._headers(request))
        except httpx.HTTPError as exc:
            return None, str(exc)
        return {
            "body": response.text,
            "status_code": response.status_code,
            "headers": _first_values(response.headers),
            "content_length": _content_length(response),
        }

    def head(self, request: HttpRequest) -> Any:
        if not request.url:
            return None, "url is required"
        try:
            with self._client() as client:
                response = client.head(request.url, headers=self._headers(request))
        except httpx.HTTPError as exc:
            return None, str(exc)
        return {
            "status_code": response.status_code,
            "headers": _first_values(response.headers),
            "content_length": _content_length(response),
        }

    def download_file(self, request: HttpRequest, filepath: str) -> str | None:
        """Stream ``request.url`` into ``filepath``. Returns an error string, or nothing on success."""
        if not filepath:
            return "filepath is required"
        if not request.url:
            return "url is required"
        description = PurePosixPath(urlparse(request.url).path).name or "Downloading..."
        try:
            with self._client() as client:
                with client.stream("GET", request.url, headers=self._headers(request)) as response:
                    if response.status_code == 404:
                        return "file not found"
                    total = _content_length(response)
                    with open(Path(filepath), "wb") as out, Progress(
                        TextColumn("{task.description}"),
                        BarColumn(),
                        DownloadColumn(),
                        TransferSpeedColumn(),
                        transient=True,
                    ) as progress:
                        task = progress.add_task(description, total=total if total >= 0 else None)
                        for chunk in response.iter_bytes():
                            out.write(chunk)
                            progress.update(task, advance=len(chunk))
        except (httpx.HTTPError, OSError) as exc:
            logger.debug("download_file {} failed: {}", request.url, exc)
            return str(exc)
        return None

    def functions(self) -> dict[str, Callable[..., Any]]:
        return {"get": self.get, "head": self.head, "download_file": self.download_file}
