"""pagecraft - generate Playwright tests from natural-language page descriptions."""

__version__ = "0.1.0"
