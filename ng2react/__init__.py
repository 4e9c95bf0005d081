"""ng2react - migrate Angular components to React function components."""

__version__ = "0.1.0"
