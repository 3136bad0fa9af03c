from __future__ import annotations

import io
import logging
from typing import List, Optional

import pyncm
import qrcode
from pyncm.apis import cloudsearch, login, playlist

from .errors import TrackAlreadyPresent
from .types import AuthToken, SearchCandidate
from .utils import call_with_retries

QR_LOGIN_URL = "https://music.163.com/login?codekey={key}"
SONG_SEARCH_TYPE = 1
DUPLICATE_CODE = 502


def render_qr_ascii(data: str) -> str:
    qr = qrcode.QRCode(border=1)
    qr.add_data(data)
    qr.make(fit=True)
    out = io.StringIO()
    qr.print_ascii(out=out, invert=True)
    return out.getvalue()


class NeteaseAuth:
    """QR login endpoints; request encryption is handled by pyncm."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.session = pyncm.GetCurrentSession()
        self.logger = logger or logging.getLogger(__name__)

    def create_key(self) -> AuthToken:
        resp = login.LoginQrcodeUnikey(dtype=1)
        key = (resp or {}).get("unikey")
        if not key:
            raise RuntimeError(f"no unikey in response: {resp}")
        return AuthToken(key=key)

    def generate_code(self, token: AuthToken) -> str:
        return render_qr_ascii(QR_LOGIN_URL.format(key=token.key))

    def check_status(self, token: AuthToken) -> int:
        resp = login.LoginQrcodeCheck(token.key)
        return int((resp or {}).get("code", 0))

    def finalize(self, token: AuthToken) -> None:
        # Cookies from the 803 response are already on the session; this fills in the account info.
        login.WriteLoginInfo(login.GetCurrentLoginStatus(), self.session)
        self.logger.info(f"Logged in as {getattr(self.session, 'nickname', None) or getattr(self.session, 'uid', '?')}")


class NeteaseSearch:
    def search(self, query: str, offset: int, limit: int) -> List[SearchCandidate]:
        resp = call_with_retries(
            cloudsearch.GetSearchResult, query, stype=SONG_SEARCH_TYPE, limit=limit, offset=offset
        )
        code = (resp or {}).get("code", 200)
        if code != 200:
            raise RuntimeError(f"search api code: {code}")
        songs = ((resp or {}).get("result") or {}).get("songs") or []
        return [
            SearchCandidate(
                id=int(s.get("id") or 0),
                name=s.get("name") or "",
                artists=[a.get("name") or "" for a in (s.get("ar") or [])],
            )
            for s in songs
        ]


class NeteasePlaylist:
    def add_tracks(self, playlist_id: int, track_ids: List[int]) -> int:
        resp = call_with_retries(
            playlist.SetManipulatePlaylistTracks, list(track_ids), playlist_id, op="add"
        )
        code = int((resp or {}).get("code", 0))
        if code == DUPLICATE_CODE:
            raise TrackAlreadyPresent(playlist_id, track_ids, code=code)
        return code
