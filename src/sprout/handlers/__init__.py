"""Built-in rewrite handlers."""
