"""Window/door measurement extraction from DXF architectural drawings."""

__version__ = "0.1.0"
