"""Command line and reporting tools for the replay client."""
