"""torrentprune - Remove files a multi-file torrent no longer references."""

__version__ = "0.1.0"
