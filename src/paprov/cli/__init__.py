"""Command-line interface for paprov."""
