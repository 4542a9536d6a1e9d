"""
Where Coffee Log keeps its files.

config.json and the data/ directory sit beside the app: the project root
when run from source, the executable's folder in a frozen (PyInstaller)
build. Translation tables ship inside the package.
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """Project root from source; the executable's folder when frozen."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).resolve().parent.parent


def get_data_dir() -> Path:
    """Directory for the file store's per-owner JSON files."""
    return get_app_dir() / "data"


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def get_translations_dir() -> Path:
    """Bundled translation tables, one {language}.json per locale."""
    return Path(__file__).parent / "translations"
