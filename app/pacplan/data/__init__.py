"""Bundled data files for pacplan."""
