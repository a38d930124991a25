"""Photo-based 5S workplace audits scored by a vision LLM."""

__version__ = "0.1.0"
