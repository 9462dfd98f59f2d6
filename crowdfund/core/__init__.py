"""Core authentication, security and logging."""
