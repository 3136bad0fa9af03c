from __future__ import annotations


class ImporterError(Exception):
    """Base class for every error raised by the importer."""


class ExtractionError(ImporterError):
    pass


class MarkerNotFound(ExtractionError):
    pass


class NoJSONStart(ExtractionError):
    pass


class MalformedJSON(ExtractionError):
    pass


class PageFetchError(ImporterError):
    pass


class InvalidPlaylistId(ImporterError, ValueError):
    pass


class AuthError(ImporterError):
    pass


class AuthInitError(AuthError):
    pass


class QRExpired(AuthError):
    pass


class AuthRetriesExhausted(AuthError):
    pass


class SearchError(ImporterError):
    pass


class TrackAlreadyPresent(ImporterError):
    """Raised by a playlist transport when the track is already in the playlist."""

    def __init__(self, playlist_id: int, track_ids, code: int | None = None):
        self.playlist_id = playlist_id
        self.track_ids = list(track_ids)
        self.code = code
        super().__init__(f"tracks {self.track_ids} already in playlist {playlist_id} (code {code})")
