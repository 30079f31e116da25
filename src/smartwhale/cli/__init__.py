"""Command-line tools for a running SmartWhale API."""
