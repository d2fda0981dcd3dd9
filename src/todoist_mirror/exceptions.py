"""Error taxonomy for the sync engine."""


class MirrorError(Exception):
    """Base class for all todoist-mirror errors."""


class ConfigError(MirrorError):
    """Configuration is missing or invalid."""


class MalformedTreeError(MirrorError):
    """A project's parent chain does not resolve (dangling parent or cycle)."""


class ConflictError(MirrorError):
    """A target path is already occupied by an unrelated file or folder."""


class TransportError(MirrorError):
    """The remote API could not be reached or returned an unusable response."""


class StoreError(MirrorError):
    """A local file operation failed unexpectedly."""
