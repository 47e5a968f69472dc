"""Error raised when text or bytes cannot be turned into a Uid."""


class InvalidFormat(ValueError):
    """Input is not a valid, correctly sized encoding of a 64 bit uid."""
