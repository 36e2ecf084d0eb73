"""mode-picker: inspect and toggle major/minor modes from an interactive picker."""

__version__ = "0.1.0"
