"""Core configuration, logging, catalog connection and errors."""
