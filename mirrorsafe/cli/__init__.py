"""Command-line interface for MirrorSafe."""
