"""Configuration — packaged config.yaml, optionally overlaid by a per-run file.

``GENESIS_CONFIG`` names an alternate YAML file whose keys replace the
packaged defaults. API keys come from ``.env`` at the repository root.
"""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv

# .env may also set GENESIS_CONFIG, so load it first
_REPO_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_REPO_ROOT / ".env")

DEFAULTS_PATH = Path(__file__).resolve().parent / "config.yaml"


def load_config(override_path: str | Path | None = None) -> dict:
    """Packaged defaults, updated with the keys of ``override_path`` if given."""
    config = yaml.safe_load(DEFAULTS_PATH.read_text(encoding="utf-8")) or {}
    if override_path:
        overrides = yaml.safe_load(Path(override_path).read_text(encoding="utf-8")) or {}
        config.update(overrides)
    return config


_config = load_config(os.environ.get("GENESIS_CONFIG"))


def get_config() -> dict:
    """Return the loaded config dictionary."""
    return _config
