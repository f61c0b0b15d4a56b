from __future__ import annotations

import abc
from typing import Any, Sequence


class AuditCapability(abc.ABC):
    """External auditor that attaches to a running browser over its debugging port."""

    @abc.abstractmethod
    async def audit(self, target_url: str, port: int, categories: Sequence[str]) -> dict[str, Any]:
        """Return the audit report (Lighthouse result shape)."""
