"""gamedash: trending games dashboard backend and relay gateway."""

__version__ = "1.0.0"
