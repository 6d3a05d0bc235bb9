"""Archive directory trees while honoring gitignore-style rules."""

__version__ = "0.3.0"
