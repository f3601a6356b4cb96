"""Keys, key bindings, navigation, themes, settings and clipboard access for a terminal music player."""

__version__ = "0.1.0"