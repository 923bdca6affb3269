"""Theme and font catalog, and a controller that keeps them in sync with settings."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace

from loguru import logger

from .models import FontSettings, UserSettings
from .store import JournalStore


@dataclass(frozen=True)
class Theme:
    name: str
    primary_color: str
    background_color: str
    text_color: str
    accent_color: str


THEMES = [
    Theme("Light", "#28a745", "#ffffff", "#333333", "#007bff"),
    Theme("Dark", "#2ecc71", "#222222", "#f0f0f0", "#3498db"),
    Theme("Sepia", "#8b4513", "#f5e8c9", "#5c3b14", "#a0522d"),
    Theme("Ocean", "#2980b9", "#e0f7fa", "#0d3c55", "#00acc1"),
    Theme("Forest", "#2ecc71", "#e8f5e9", "#1b5e20", "#43a047"),
]

# (display name, CSS value)
FONTS = [
    ("Default", "Segoe UI, sans-serif"),
    ("Serif", "Georgia, serif"),
    ("Monospace", "Consolas, monospace"),
    ("Handwriting", "Caveat, cursive"),
    ("Elegant", "Playfair Display, serif"),
]

FONT_SIZES = [
    ("Small", "small"),
    ("Medium", "medium"),
    ("Large", "large"),
    ("X-Large", "x-large"),
]


def find_theme(name: str) -> Theme | None:
    wanted = (name or "").strip().lower()
    for theme in THEMES:
        if theme.name.lower() == wanted:
            return theme
    return None


ApplyFn = Callable[[Theme, FontSettings], None]


class ThemeController:
    """Tracks the active theme and font from the store's settings channel.

    ``apply`` is called with the resolved theme and font every time the
    settings change (and once on construction); a UI layer hooks its
    restyling in there.
    """

    def __init__(self, store: JournalStore, apply: ApplyFn | None = None):
        self._store = store
        self._apply = apply
        self.theme: Theme = THEMES[0]
        self.font = FontSettings()
        self._subscription = store.settings.subscribe(self._on_settings)

    @property
    def is_dark_mode(self) -> bool:
        return self.theme.name == "Dark"

    def _on_settings(self, settings: UserSettings) -> None:
        theme = find_theme(settings.theme)
        if theme is None:
            logger.warning(f"Unknown theme '{settings.theme}', falling back to Light")
            theme = THEMES[0]
        self.theme = theme
        self.font = replace(settings.font)
        if self._apply is not None:
            self._apply(self.theme, self.font)

    def toggle_dark_mode(self) -> bool:
        """Flip between light and dark. Returns the new dark-mode state."""
        self.set_theme("light" if self.is_dark_mode else "dark")
        return self.is_dark_mode

    def set_theme(self, name: str) -> None:
        theme = find_theme(name)
        if theme is None:
            raise ValueError(f"Unknown theme: {name}")
        settings = self._store.get_settings()
        self._store.update_settings(replace(settings, theme=theme.name.lower()))

    def set_font(self, family: str, size: str) -> None:
        settings = self._store.get_settings()
        self._store.update_settings(replace(settings, font=FontSettings(family=family, size=size)))

    def dispose(self) -> None:
        self._subscription.close()
