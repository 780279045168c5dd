"""Browser widget server."""
