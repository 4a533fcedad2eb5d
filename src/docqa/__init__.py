"""Document question answering: upload a file, then chat with it."""

__version__ = "0.1.0"
