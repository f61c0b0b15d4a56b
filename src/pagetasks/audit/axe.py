from __future__ import annotations

from pathlib import Path

from ..errors import ConfigurationError


def load_axe_source(path: Path) -> str:
    """Read the axe-core bundle that is injected into audited pages."""

    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"axe-core script not readable at {path}: {exc}") from exc
    if not source.strip():
        raise ConfigurationError(f"axe-core script at {path} is empty")
    return source
