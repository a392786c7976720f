"""Find GitHub repository context in URLs and browser windows."""

__version__ = "0.1.0"
