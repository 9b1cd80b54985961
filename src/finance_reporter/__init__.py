"""Personal finance reporting: window resolution, aggregation and PDF reports."""

__version__ = "0.1.0"
