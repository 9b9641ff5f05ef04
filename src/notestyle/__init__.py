"""Writing-style learning for notes: analyze, merge and prompt."""

__version__ = "0.1.0"
