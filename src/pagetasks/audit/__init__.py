from __future__ import annotations

from .axe import load_axe_source
from .base import AuditCapability
from .lighthouse import LighthouseAuditor

__all__ = ["AuditCapability", "LighthouseAuditor", "load_axe_source"]
