"""Command-line entry point and archive helpers for the analyzer."""
