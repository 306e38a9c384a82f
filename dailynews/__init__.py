"""
Daily Info Center: per-topic daily article generation, on-demand speech and
scraped social content.

Collaborators are wired explicitly through ``dailynews.services.build_services``.
"""
from __future__ import annotations

__version__ = "1.0.0"
