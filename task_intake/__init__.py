"""Free text to Vikunja tasks, via LLM extraction."""

__version__ = "0.1.0"
