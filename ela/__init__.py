"""Error-log analysis: group error events into incidents and explain them."""

__version__ = "0.1.0"
