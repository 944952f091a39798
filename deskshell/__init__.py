"""Desktop shell core: application and icon discovery, XPM decoding, settings, bar layout, picker, switcher and session runner."""

__version__ = "0.2.0"