"""Version information for :mod:`rdfquery`."""

__all__ = [
    "VERSION",
]

VERSION = "0.1.0"
