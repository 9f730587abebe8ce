"""Command-line interface for treedoc."""
