"""Insurance policy, identification and application workflows."""

__version__ = "0.1.0"
