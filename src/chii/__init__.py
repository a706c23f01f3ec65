"""chii: read-through caching and trending aggregation for a content-tracking service."""

__version__ = "0.1.0"
