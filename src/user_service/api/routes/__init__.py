"""Route modules, mounted under /user-service."""
