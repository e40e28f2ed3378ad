"""
Settings for the pasteval engine and CLI.
"""
import json
import os
from typing import List

from pydantic import BaseModel, ValidationError

CONFIG_PATHS = ["pasteval.json", os.path.join("~", ".pasteval", "config.json")]


class Settings(BaseModel):
    """Engine settings read from ``pasteval.json``."""
    filename: str = "<console>"
    console_name: str = "console"
    capture_print: bool = True
    module_paths: List[str] = []


def find_config(paths=None):
    """Return the first existing config file path, or None."""
    for p in paths or CONFIG_PATHS:
        p = os.path.expanduser(p)
        if os.path.exists(p):
            return p
    return None


def load_settings(paths=None, on_error=None):
    """
    Load settings from the first config file found.

    A missing file yields defaults. An unreadable or invalid file also yields
    defaults and is reported through ``on_error(message)`` when given.
    """
    path = find_config(paths)
    if path is None:
        return Settings()
    try:
        with open(path, "r") as f:
            data = json.load(f)
        return Settings.model_validate(data)
    except (OSError, ValueError, ValidationError) as e:
        if on_error is not None:
            on_error(f"Ignoring config {path}: {e}")
        return Settings()
