"""Command-line interface for Coeus."""
