"""devflow: activity telemetry engine for the DevFlow editor plugin."""

import tomllib
from pathlib import Path

try:
    # Development checkout: read the version straight from pyproject.toml
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    __version__ = data["project"]["version"]
except Exception:
    # Installed (non-editable): fall back to package metadata
    try:
        from importlib.metadata import version

        __version__ = version("devflow-telemetry")
    except Exception:
        __version__ = "0.0.0-dev"
