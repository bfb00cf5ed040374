"""Typer command line for rendering travel maps."""
