"""Command line interface for studio edits."""
