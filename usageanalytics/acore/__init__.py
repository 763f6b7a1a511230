"""Core transport: analytics messages, batching, retries and HTTP delivery."""

__version__ = "0.1.0"