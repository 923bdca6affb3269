"""Core infrastructure: config, events, storage, logging, and the CLI."""
