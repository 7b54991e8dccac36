"""
Config Loader - Pricing Scout
=============================
Loads configuration from configs/config.yaml with support for:
- General settings (default website, log level)
- HTTP fetch limits (timeout, redirects, body cap, headers)
- Browser render settings (headless, deadline, settle delays)
- Extraction limits (content cap, minimum content, script payload caps)
- AI settings (OpenAI primary, Claude alternative)
- Heuristics table (keyword lists + scoring constants)
- PostgreSQL settings (saved competitor plans)

Every section has defaults, so a missing config file is not fatal.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class GeneralConf:
    """General application settings"""
    default_website: str = "https://www.usemotion.com/"
    log_level: str = "info"  # "silent", "error", "info", "debug"


@dataclass(frozen=True)
class HttpConf:
    """Static fetch settings. Shared by every request, never mutated."""
    timeout_sec: float = 30.0
    max_redirects: int = 10
    max_body_bytes: int = 5 * 1024 * 1024
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
    accept_language: str = "en-US,en;q=0.5"
    probe_user_agent: str = "Mozilla/5.0 (compatible; PricingScout/1.0)"


@dataclass
class BrowserConf:
    """Headless browser pass settings"""
    enabled: bool = True
    headless: bool = True
    timeout_sec: float = 60.0         # overall deadline for one render
    settle_sec: float = 3.0           # after first load
    click_settle_sec: float = 1.5     # after each tab click
    max_click_attempts: int = 2


@dataclass
class ExtractionConf:
    """Content limits for the extraction pass"""
    max_content_chars: int = 25000
    min_content_chars: int = 100
    script_raw_limit: int = 50000
    script_keep_limit: int = 5000
    max_candidates: int = 5


@dataclass
class AIConf:
    """AI settings - OpenAI primary, Claude as alternative provider"""
    provider: str = "openai"  # "openai" or "claude"
    openai_model: str = "gpt-4o-mini"
    claude_model: str = "claude-3-5-haiku-20241022"
    temperature: float = 0.1
    max_tokens: int = 4000


@dataclass
class HeuristicsConf:
    """
    Tunable keyword lists and scoring constants.

    Discovery, toggle detection, tab scoring and click verification all
    read from here, so thresholds can be recalibrated without touching
    control flow.
    """
    # --- Discovery ---
    common_pricing_paths: List[str] = field(default_factory=lambda: [
        "/pricing", "/plans", "/billing", "/upgrade", "/subscribe", "/pro", "/premium",
    ])
    path_probe_base_score: int = 100
    path_probe_decay: int = 10
    link_keyword_score: int = 50
    pricing_link_keywords: List[str] = field(default_factory=lambda: [
        "pricing", "price", "plan", "plans", "billing",
        "upgrade", "subscribe", "signup", "membership",
        "pro", "premium", "enterprise",
    ])

    # --- Embedded script data ---
    script_pricing_keywords: List[str] = field(default_factory=lambda: [
        "price", "plan", "subscription", "monthly", "yearly", "annual", "billing",
    ])

    # --- Toggle detection ---
    toggle_indicators: List[str] = field(default_factory=lambda: [
        "pay monthly", "pay annually", "monthly", "yearly", "annual",
        "billed monthly", "billed annually", "billed yearly",
        "save", "per month", "per year", "/mo", "/yr",
        "switch to annual", "switch to monthly",
    ])
    toggle_structural_markers: List[str] = field(default_factory=lambda: [
        'role="tablist"', 'role="tab"', "toggle", "switch",
    ])
    toggle_min_indicators: int = 2
    toggle_min_indicators_with_structure: int = 1
    render_max_periods: int = 1

    # --- Tab scoring ---
    monthly_tab_keywords: List[str] = field(default_factory=lambda: [
        "monthly", "month", "/mo", "per month", "mo", "pay monthly", "billed monthly",
    ])
    yearly_tab_keywords: List[str] = field(default_factory=lambda: [
        "yearly", "annual", "annually", "year", "/yr", "per year",
        "pay annually", "billed annually", "save", "pay yearly",
    ])
    tab_keyword_hit: int = 10
    tab_exact_match_bonus: int = 20
    tab_role_bonus: int = 5
    tab_aria_selected_bonus: int = 3

    # --- Click verification ---
    similarity_threshold: float = 0.95
    min_changed_text_chars: int = 100
    monthly_state_phrases: List[str] = field(default_factory=lambda: [
        "billed monthly", "/mo", "per month", "monthly billing",
    ])
    yearly_state_phrases: List[str] = field(default_factory=lambda: [
        "billed annually", "billed yearly", "/yr", "per year", "save", "annually",
    ])


@dataclass
class PGConf:
    """PostgreSQL connection settings"""
    host: str = "localhost"
    port: int = 5432
    db: str = "pricing_scout"
    user: str = "scout"
    password: str = ""


@dataclass
class Cfg:
    """Main configuration container"""
    general: GeneralConf = field(default_factory=GeneralConf)
    http: HttpConf = field(default_factory=HttpConf)
    browser: BrowserConf = field(default_factory=BrowserConf)
    extraction: ExtractionConf = field(default_factory=ExtractionConf)
    ai: AIConf = field(default_factory=AIConf)
    heuristics: HeuristicsConf = field(default_factory=HeuristicsConf)
    pg: PGConf = field(default_factory=PGConf)


def _section(cls, values: Optional[Dict[str, Any]]):
    """Builds a dataclass section, ignoring unknown keys."""
    values = values or {}
    known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
    return cls(**known)


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Loads configuration from YAML file.

    Searches for config in multiple locations:
    1. explicit path (must exist)
    2. configs/config.yaml (relative to working dir)
    3. config.yaml (relative to working dir)
    4. configs/config.yaml (relative to this file)

    Returns defaults when no file is found.
    """
    if path:
        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")
        config_paths = [path]
    else:
        config_paths = [
            "configs/config.yaml",
            "config.yaml",
            os.path.join(os.path.dirname(__file__), "configs/config.yaml"),
        ]

    config_path = None
    for candidate in config_paths:
        if os.path.exists(candidate):
            config_path = candidate
            break

    if not config_path:
        return Cfg()

    with open(config_path, "r", encoding="utf-8") as f:
        y = yaml.safe_load(f) or {}

    return Cfg(
        general=_section(GeneralConf, y.get("general")),
        http=_section(HttpConf, y.get("http")),
        browser=_section(BrowserConf, y.get("browser")),
        extraction=_section(ExtractionConf, y.get("extraction")),
        ai=_section(AIConf, y.get("ai")),
        heuristics=_section(HeuristicsConf, y.get("heuristics")),
        pg=_section(PGConf, y.get("postgres")),
    )


def print_config_summary(cfg: Cfg):
    """Prints a summary of loaded configuration"""
    print("\n" + "=" * 60)
    print("📋 Configuration Summary - Pricing Scout")
    print("=" * 60)
    print(f"  AI Provider:      {cfg.ai.provider.upper()}")
    if cfg.ai.provider == "claude":
        print(f"  Claude Model:     {cfg.ai.claude_model}")
    else:
        print(f"  OpenAI Model:     {cfg.ai.openai_model}")
    print(f"  Max content:      {cfg.extraction.max_content_chars} chars")
    print("-" * 60)
    print(f"  HTTP timeout:     {cfg.http.timeout_sec}s")
    print(f"  Max redirects:    {cfg.http.max_redirects}")
    print(f"  Max body:         {cfg.http.max_body_bytes // (1024 * 1024)} MB")
    print("-" * 60)
    print(f"  Browser render:   {'ENABLED ✅' if cfg.browser.enabled else 'DISABLED'}")
    print(f"  Browser deadline: {cfg.browser.timeout_sec}s")
    print(f"  Click attempts:   {cfg.browser.max_click_attempts}")
    print("=" * 60)
