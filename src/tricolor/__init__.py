"""Tricolor: fairness-constrained three-color prize draws with a timed reveal."""

__version__ = "0.1.0"
