from __future__ import annotations

from .collector import ErrorCollector
from .links import LinkValidator, extract_links, unique_http_links
from .navigation import navigate
from .session import BrowserSession, BrowserSessionManager
from .steps import StepExecutor

__all__ = [
	"BrowserSession",
	"BrowserSessionManager",
	"ErrorCollector",
	"LinkValidator",
	"StepExecutor",
	"extract_links",
	"navigate",
	"unique_http_links",
]
