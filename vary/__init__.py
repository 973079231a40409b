"""vary - changesets shortcuts and napi multi-platform publishing."""

__version__ = "1.4.0"
