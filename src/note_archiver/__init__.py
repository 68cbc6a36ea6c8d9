"""Archive notes and their linked notes to zip/tar files and import them back."""
__version__ = "0.1.0"
