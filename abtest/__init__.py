"""A/B testing engine: experiments, assignment, conversions and results."""

__version__ = "0.1.0"
