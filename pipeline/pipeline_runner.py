"""
Pipeline Runner - Main Processing Flow
=======================================
Orchestrates discovery and the three-stage extraction strategy:

1. Static parse  - fetch, visible + hidden + script content, AI extraction
2. Detection     - toggle heuristics vs. periods actually recovered
3. Browser pass  - only when a toggle is suspected and <= 1 period was found

CRITICAL: Errors never cross this boundary. Validation, fetch, content and
extraction failures become the response `error`; browser failures are
downgraded to the static result. Warnings are append-only.
"""

from typing import Optional

from config import Cfg
from core.errors import (
    BrowserRenderFailed,
    ContentTooShort,
    ExtractionFailed,
    InvalidURL,
    PricingScoutError,
)
from extraction.ai_extractor import extract_plans_with_ai
from extraction.content_builder import build_static_content
from logging_utils.request_log import RequestLog
from models.pricing_response import ExtractionResult, PricingDiscoverResponse, PricingExtractResponse
from pipeline.browser_render import BrowserRenderer
from pipeline.decision_gates import (
    detect_billing_toggle,
    needs_browser_render,
    should_replace_static_result,
)
from pipeline.deduplicator import deduplicate_plans, detect_billing_periods
from pipeline.discovery import discover_pricing_page
from scrapers.browser_session import open_browser_session
from scrapers.http_fetcher import FetchedPage, HttpFetcher
from scrapers.page_parser import parse_page
from scrapers.url_guard import normalize_url, validate_url
from utils_logging import log_info, log_warning


class PricingPipeline:
    """
    Entry point for DiscoverPricingPage / ExtractPricing.

    The fetcher (immutable config + session) and AI client are shared;
    everything else lives for one request.
    """

    def __init__(
        self,
        cfg: Optional[Cfg] = None,
        ai_client=None,
        fetcher: Optional[HttpFetcher] = None,
        session_factory=open_browser_session,
    ):
        self.cfg = cfg or Cfg()
        self.ai_client = ai_client
        self.fetcher = fetcher or HttpFetcher(self.cfg.http)
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _model_name(self) -> str:
        if self.cfg.ai.provider == "claude":
            return self.cfg.ai.claude_model
        return self.cfg.ai.openai_model

    def _extract(self, content: str, source_url: str, purpose: str, log: RequestLog) -> ExtractionResult:
        """Runs one AI extraction and records its cost on the request log."""
        cost_before = self._run_cost()
        try:
            return extract_plans_with_ai(
                content,
                source_url,
                self.ai_client,
                max_chars=self.cfg.extraction.max_content_chars,
                max_tokens=self.cfg.ai.max_tokens,
            )
        finally:
            log.log_ai_call(purpose, self._model_name(), self._run_cost() - cost_before)

    def _run_cost(self) -> float:
        get_run_cost = getattr(self.ai_client, "get_run_cost", None)
        return get_run_cost() if get_run_cost else 0.0

    def _check_content(self, page: FetchedPage):
        length = len(page.visible_text)
        if length < self.cfg.extraction.min_content_chars:
            raise ContentTooShort(length, self.cfg.extraction.min_content_chars)

    def _finish(self, log: RequestLog, response):
        for code in getattr(response, "warnings", []):
            log.log_warning(code)
        log.print_summary()
        return response

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def discover_pricing_page(self, website_url: str) -> PricingDiscoverResponse:
        """Ranked pricing page candidates for a website."""
        log = RequestLog("discover_pricing_page", website_url)
        response = discover_pricing_page(website_url, self.fetcher, self.cfg, request_log=log)
        return self._finish(log, response)

    def extract_pricing(self, pricing_url: str, use_browser: bool = True) -> PricingExtractResponse:
        """
        Extracts plans from a pricing page.

        Args:
            pricing_url: Page to extract from (normalized and SSRF-checked)
            use_browser: Allow the browser pass (also gated by config)

        Returns:
            PricingExtractResponse, with `error` set instead of raising
        """
        log = RequestLog("extract_pricing", pricing_url)
        url = normalize_url(pricing_url)
        response = PricingExtractResponse(source_url=url)

        # === STAGE 1: STATIC PARSE ===
        try:
            validate_url(url, self.fetcher.resolver)
        except InvalidURL as e:
            response.error = f"invalid URL: {e}"
            return self._finish(log, response)

        try:
            page = self.fetcher.fetch(url)
        except PricingScoutError as e:
            response.error = f"failed to fetch page: {e}"
            return self._finish(log, response)
        log.log_step("fetch", status=page.status, chars=len(page.visible_text), truncated=page.truncated)

        try:
            self._check_content(page)
        except ContentTooShort as e:
            log_warning(f"{url}: {e}")
            response.error = "page content too short or empty"
            response.warnings.append("page_content_minimal")
            return self._finish(log, response)

        parsed = parse_page(page.raw_html, self.cfg.extraction, self.cfg.heuristics)
        content = build_static_content(parsed)

        # === STAGE 2: DETECTION ===
        has_toggle = detect_billing_toggle(page.visible_text, page.raw_html, self.cfg.heuristics)
        log.log_step("toggle_detection", has_toggle=has_toggle)

        try:
            result = self._extract(content, url, "static_extraction", log)
        except ExtractionFailed as e:
            response.error = f"extraction failed: {e}"
            response.warnings.extend(e.warnings)
            return self._finish(log, response)

        plans = deduplicate_plans(result.plans)
        periods = detect_billing_periods(plans)
        response.warnings.extend(result.warnings)

        needs_render = needs_browser_render(has_toggle, periods, self.cfg.heuristics)
        if needs_render:
            response.warnings.append("toggle_detected_single_period")

        # === STAGE 3: BROWSER PASS ===
        if needs_render and use_browser and self.cfg.browser.enabled:
            log.log_step("escalation", from_phase="static", to_phase="browser",
                         reason="toggle_detected_single_period")
            log_info(f"   🔄 Toggle detected, rendering {url}")

            renderer = BrowserRenderer(
                self.cfg,
                lambda c, u, purpose: self._extract(c, u, purpose, log),
                self.session_factory,
            )
            try:
                outcome = renderer.render_and_extract(url)
            except (BrowserRenderFailed, ExtractionFailed) as e:
                log_warning(f"Browser render failed for {url}: {e}")
                response.warnings.append("browser_render_failed")
            else:
                response.render_used = True
                if should_replace_static_result(len(plans), periods, len(outcome.plans), outcome.periods):
                    plans = outcome.plans
                    periods = outcome.periods
                    needs_render = False
                    response.warnings.extend(outcome.warnings)
                else:
                    # static plans stay; keep the trail of what the browser pass tried
                    response.warnings.extend(
                        w for w in outcome.warnings if w not in response.warnings
                    )
                    response.warnings.append("browser_result_not_better")

        response.plans = plans
        response.detected_periods = periods
        response.needs_render = needs_render

        log_info(f"   ✅ {len(plans)} plans, periods={periods or ['none']} from {url}")
        return self._finish(log, response)
