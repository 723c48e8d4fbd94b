"""Data models, exceptions and file loaders."""
