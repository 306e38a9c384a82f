"""
Load ``config/extraction.yaml`` (site patterns + selectors) with ``${ENV}`` expansion.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlparse

import yaml

logger = logging.getLogger(__name__)

DEFAULT_READER_PROXY_SITES = (
    "mp.weixin.qq.com",
    "x.com",
    "twitter.com",
    "medium.com",
    "zhihu.com",
    "xiaohongshu.com",
    "linkedin.com",
)

DEFAULT_SITE_BODY_SELECTORS = {
    "mp.weixin.qq.com": ["#js_content", ".rich_media_content"],
    "zhihu.com": [".Post-RichText", ".RichText"],
    "medium.com": ["article section"],
}

DEFAULT_SITE_TITLE_SELECTORS = {
    "mp.weixin.qq.com": ["#activity-name", ".rich_media_title"],
    "zhihu.com": [".Post-Title"],
}


@dataclass
class ExtractionRules:
    reader_proxy_sites: List[str] = field(default_factory=lambda: list(DEFAULT_READER_PROXY_SITES))
    body_selectors: Dict[str, List[str]] = field(default_factory=lambda: dict(DEFAULT_SITE_BODY_SELECTORS))
    title_selectors: Dict[str, List[str]] = field(default_factory=lambda: dict(DEFAULT_SITE_TITLE_SELECTORS))

    def prefers_reader_proxy(self, url: str) -> bool:
        return _match_site(url, self.reader_proxy_sites) is not None

    def body_selectors_for(self, url: str) -> List[str]:
        site = _match_site(url, self.body_selectors.keys())
        return list(self.body_selectors.get(site, [])) if site else []

    def title_selectors_for(self, url: str) -> List[str]:
        site = _match_site(url, self.title_selectors.keys())
        return list(self.title_selectors.get(site, [])) if site else []


def _match_site(url: str, sites) -> Optional[str]:
    host = (urlparse(url).hostname or "").lower()
    if not host:
        return None
    for site in sites:
        site = site.lower().lstrip(".")
        if host == site or host.endswith("." + site):
            return site
    return None


def load_extraction_rules(path: Optional[Union[str, Path]] = None) -> ExtractionRules:
    if path is None:
        return ExtractionRules()
    config_path = Path(path)
    if not config_path.exists():
        logger.info("Extraction config not found at %s; using built-in rules", config_path)
        return ExtractionRules()
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    data = _expand_env(data)
    rules = ExtractionRules()
    reader = data.get("reader_proxy") or {}
    sites = reader.get("sites")
    if isinstance(sites, list):
        rules.reader_proxy_sites = [str(site) for site in sites if site]
    for key, target in (("body_selectors", rules.body_selectors), ("title_selectors", rules.title_selectors)):
        section = data.get(key)
        if not isinstance(section, dict):
            continue
        target.clear()
        for site, selectors in section.items():
            if isinstance(selectors, str):
                selectors = [selectors]
            if isinstance(selectors, list):
                target[str(site)] = [str(sel) for sel in selectors if sel]
    return rules


def _expand_env(data: Dict[str, Any]) -> Dict[str, Any]:
    def replace(value: Any) -> Any:
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            env_key = value[2:-1]
            return os.getenv(env_key, "")
        if isinstance(value, dict):
            return {k: replace(v) for k, v in value.items()}
        if isinstance(value, list):
            return [replace(item) for item in value]
        return value

    return replace(data)  # type: ignore[return-value]
