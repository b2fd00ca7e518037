class PreconditionError(ValueError):
    """A required correlating field is missing (ex.: upsert de usuario sem openId)."""


class IndexUnavailableError(Exception):
    """The store cannot serve the requested ordering (missing composite index)."""
