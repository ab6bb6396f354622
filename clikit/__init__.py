"""Building blocks for command-line applications: typed values, flags, help text helpers and suggestions."""

__version__ = "0.1.0"

__all__ = ["flag", "multivalue", "suggestions", "textutil", "values"]