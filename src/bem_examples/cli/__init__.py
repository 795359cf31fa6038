"""Command-line interface for bem-examples."""
