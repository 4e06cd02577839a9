"""Game logic for a side-scrolling platformer: levels, enemies, gates, fonts and menus."""

__version__ = "0.1.0"