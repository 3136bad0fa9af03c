from __future__ import annotations

import json
from typing import Any, Optional

import requests
import urllib3

from .errors import MalformedJSON, MarkerNotFound, NoJSONStart, PageFetchError

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

_decoder = json.JSONDecoder()


def extract_embedded_json(html: str, marker: str) -> Any:
    """Decode the JSON object assigned to ``marker`` inside an HTML page.

    Only the first complete JSON value after the marker is decoded; whatever
    follows it (``;</script>``, more script, closing tags) is ignored.
    """
    start = html.find(marker)
    if start == -1:
        raise MarkerNotFound(f"{marker.strip()} not found in HTML")

    remaining = html[start + len(marker):]
    lbrace = remaining.find("{")
    if lbrace == -1:
        raise NoJSONStart(f"could not find JSON start '{{' after {marker.strip()}")

    try:
        value, _end = _decoder.raw_decode(remaining, lbrace)
    except json.JSONDecodeError as e:
        raise MalformedJSON(f"failed to parse JSON: {e}") from e
    return value


def fetch_html(url: str, timeout: float = 15.0, session: Optional[requests.Session] = None) -> str:
    """GET a share page, following redirects.

    Certificate validation is disabled for the share domain.
    """
    http = session or requests.Session()
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    try:
        resp = http.get(
            url,
            headers={"User-Agent": BROWSER_UA, "Accept-Language": "zh-CN,zh;q=0.9,en;q=0.8"},
            timeout=timeout,
            allow_redirects=True,
            verify=False,
        )
        resp.raise_for_status()
    except requests.RequestException as e:
        raise PageFetchError(f"failed to fetch {url}: {e}") from e
    # Share pages are UTF-8 and often send no charset.
    return resp.content.decode("utf-8", errors="replace")
