"""
Command-Line Layer.

This package contains the Typer application and its Rich formatters.
"""
