"""Utility library shared by im-batch.

Settings, logging and HTTP helpers used by the batch runner, the script
updater and the UI. Keeping an explicit __init__ ensures packaging with
setuptools find_packages.
"""
from __future__ import annotations
