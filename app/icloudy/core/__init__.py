"""Core infrastructure: configuration, paths, theme and deadlines."""
