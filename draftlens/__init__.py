"""DraftLens: document analysis and suggestion reconciliation backend."""

__version__ = "1.0.0"
