"""Small shared helpers (logging setup, text processing)."""
