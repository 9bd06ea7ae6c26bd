"""
Scouter package initializer.
Defines package version and exposes the crawler and search facade.
"""
__version__ = "0.1.0"

from scouter.crawler.crawler import Crawler
from scouter.crawler.models import Page, Priority, TargetLink, TerminationReason
from scouter.crawler.state import CrawlerState
from scouter.domain_control import DomainControl
from scouter.engine import Engine, ScoutResult, start_search

__all__ = [
    "__version__",
    "Crawler",
    "CrawlerState",
    "DomainControl",
    "Engine",
    "Page",
    "Priority",
    "ScoutResult",
    "TargetLink",
    "TerminationReason",
    "start_search",
]
