"""Church letter templates, variable substitution and generation history."""

__version__ = "0.1.0"
