"""Article store behind the blog RSS/Atom feeds."""

__version__ = "0.1.0"
