"""Building blocks for function runners: archives, runner metadata, a file cache and chat helpers."""

__version__ = "0.1.0"