"""Error taxonomy for Veille RSS."""


class VeilleError(Exception):
    """Base class for all Veille RSS errors."""


class FeedFetchError(VeilleError):
    """Raised when a single feed source cannot be fetched."""


class FeedParseError(VeilleError):
    """Raised when a feed payload matches neither the RSS nor the Atom dialect."""


class SnapshotLoadError(VeilleError):
    """Raised when the snapshot document or the source list cannot be loaded."""
