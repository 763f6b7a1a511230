"""Product usage analytics: typed events, identifier hashing and batched delivery."""

__version__ = "0.1.0"