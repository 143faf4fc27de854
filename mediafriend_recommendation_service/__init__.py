"""Friends' media recommendations and personal lists for movies/TV, music, books and games."""

__version__ = "1.0.0"
