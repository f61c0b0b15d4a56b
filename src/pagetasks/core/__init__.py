from __future__ import annotations

from .orchestrator import TaskOrchestrator

__all__ = ["TaskOrchestrator"]
