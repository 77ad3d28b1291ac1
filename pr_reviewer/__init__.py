"""Automated pull request review bot driven by an LLM."""

__version__ = "0.1.0"
