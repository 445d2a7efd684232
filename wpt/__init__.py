"""WordPress plugin release tooling."""

__version__ = "1.0.0"
