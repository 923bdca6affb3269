"""daybook: a personal journal with a persisted, observable data layer."""

__version__ = "0.1.0"
