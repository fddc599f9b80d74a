"""Publish watchfolder messages for catalog batches."""

__version__ = "0.1.0"
