"""Search index synchronization service for document-store records."""

__version__ = "0.1.0"
