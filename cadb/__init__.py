"""C-alpha distance database builder and loop search."""

__version__ = "1.2.0"
