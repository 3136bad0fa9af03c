"""Import Douyin (Qishui) playlists into NetEase Cloud Music."""

__version__ = "0.1.0"
