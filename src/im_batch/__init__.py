"""Batch front-end and script updater for ImageMagick effect scripts."""

__version__ = "0.1.0"
