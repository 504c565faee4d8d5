"""gochunk-mcp: extract search-ready chunks from Go codebases."""

__version__ = "0.1.0"
