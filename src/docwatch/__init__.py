"""DocWatch: document and license expiration tracking."""

__version__ = "0.1.0"
