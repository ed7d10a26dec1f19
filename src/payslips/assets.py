from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote, urlparse

import httpx

from .exceptions import AssetFetchError

AssetSource = Callable[[str], bytes]


class AssetFetcher:
    """Load image bytes from an http(s) URL, a file:// URL or a filesystem path."""

    def __init__(self, base_dir: Optional[Path] = None, client: Optional[httpx.Client] = None):
        self.base_dir = base_dir
        self.client = client

    def __call__(self, url: str) -> bytes:
        if not url:
            raise AssetFetchError("No asset URL configured")
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https"):
            return self._fetch_remote(url)
        if parsed.scheme == "file":
            return self._read_local(Path(unquote(parsed.path)))
        if parsed.scheme and len(parsed.scheme) > 1:
            raise AssetFetchError(f"Unsupported asset URL scheme: {parsed.scheme}")
        return self._read_local(Path(url))

    def _fetch_remote(self, url: str) -> bytes:
        try:
            if self.client is not None:
                response = self.client.get(url, follow_redirects=True)
            else:
                response = httpx.get(url, follow_redirects=True, timeout=None)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise AssetFetchError(f"Asset not found at {url} (HTTP {exc.response.status_code})") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise AssetFetchError(f"Could not fetch asset {url}: {exc}") from exc
        return response.content

    def _read_local(self, path: Path) -> bytes:
        # Leading "/" means "asset root", the way web apps address public files.
        if self.base_dir is not None and not path.exists():
            path = self.base_dir / str(path).lstrip("/")
        try:
            return path.read_bytes()
        except OSError as exc:
            raise AssetFetchError(f"Asset not found at {path}") from exc
