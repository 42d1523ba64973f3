"""Core infrastructure: settings, logging, security, database, error handling."""
