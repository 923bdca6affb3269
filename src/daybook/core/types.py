"""Shared type aliases used across daybook."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

# Config value types
ConfigDict = dict[str, Any]

# Path types
PathLike = str | Path

# Injected wall clock
Clock = Callable[[], datetime]
