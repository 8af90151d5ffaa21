"""Collect, gate and deliver a one-shot host metrics report."""

__version__ = "1.0.0"
