"""HTTP boundary: routes, dependencies and cookie handling."""
