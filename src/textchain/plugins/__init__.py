"""Plugins: provider backends and the clients they use."""
