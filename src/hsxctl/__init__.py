"""hsxctl — build and render HSX command scripts."""

__version__ = "0.1.0"
