"""Request-window resolution and startup migrations."""
