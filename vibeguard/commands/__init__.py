"""Command-line commands for VibeGuard."""
