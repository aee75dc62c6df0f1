"""Video timeline composition, preview and export engine for brand assets."""

__version__ = "0.1.0"
