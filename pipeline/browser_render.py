"""
Browser Render - Toggle-Aware Re-extraction
===========================================
Runs only when a billing toggle is suspected and the static pass saw at
most one billing period.

Flow:
1. Load page, settle, capture default state
2. Locate monthly / yearly tabs (tab_scoring)
3. Click each tab (max attempts per tab) and verify the state changed
4. Close the browser, build one combined content block, extract once
5. Deduplicate

A deadline expiry while locating or clicking keeps what was captured so
far; an expiry while loading fails the whole pass.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from config import Cfg
from core.errors import BrowserDeadlineExceeded, BrowserRenderFailed
from extraction.content_builder import build_browser_content, merge_script_data
from models.extracted_plan import ExtractedPlan
from models.pricing_response import ExtractionResult, TabCandidate
from pipeline.deduplicator import deduplicate_plans, detect_billing_periods
from pipeline.tab_scoring import ARIA_SELECTED_SCRIPT, TAB_DISCOVERY_SCRIPT, select_billing_tabs
from scrapers.browser_session import BrowserSession, open_browser_session
from scrapers.page_parser import extract_structured_data
from utils_logging import log_debug, log_info, log_warning
from utils_text import contains_any, text_similarity


BILLING_SIDES = ("monthly", "yearly")


@dataclass
class CapturedState:
    """Markup and text of one page state."""
    html: str = ""
    text: str = ""


@dataclass
class RenderOutcome:
    """Deduplicated result of the browser pass."""
    plans: List[ExtractedPlan] = field(default_factory=list)
    periods: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class BrowserRenderer:
    """
    Browser-assisted re-extractor.

    extract_fn(content, source_url, purpose) -> ExtractionResult runs the
    extraction step on the combined content; session_factory(conf) yields
    a BrowserSession (Playwright by default).
    """

    def __init__(
        self,
        cfg: Cfg,
        extract_fn: Callable[[str, str, str], ExtractionResult],
        session_factory=open_browser_session,
    ):
        self.cfg = cfg
        self.extract_fn = extract_fn
        self.session_factory = session_factory

    # ------------------------------------------------------------------
    # state verification
    # ------------------------------------------------------------------

    def text_state_changed(self, new_text: str, previous_text: str, billing_type: str) -> bool:
        """Checks (a) significant text change and (b) billing phrases for the clicked side."""
        h = self.cfg.heuristics

        if new_text != previous_text and len(new_text) > h.min_changed_text_chars:
            similarity = text_similarity(previous_text, new_text)
            if similarity < h.similarity_threshold:
                log_debug(f"text changed (similarity: {similarity:.2f})")
                return True

        phrases = h.monthly_state_phrases if billing_type == "monthly" else h.yearly_state_phrases
        return contains_any(new_text, phrases)

    def verify_state_change(
        self,
        session: BrowserSession,
        new_text: str,
        previous_text: str,
        billing_type: str,
    ) -> bool:
        """Any one of: text change, billing phrase, aria-selected tab, URL signal."""
        if self.text_state_changed(new_text, previous_text, billing_type):
            return True

        try:
            if session.evaluate_js(ARIA_SELECTED_SCRIPT, billing_type) is True:
                return True
        except BrowserDeadlineExceeded:
            raise
        except BrowserRenderFailed as e:
            log_debug(f"aria-selected check failed: {e}")

        return billing_type in (session.current_url() or "").lower()

    # ------------------------------------------------------------------
    # browser steps
    # ------------------------------------------------------------------

    def _load(self, session: BrowserSession, url: str) -> CapturedState:
        session.navigate(url)
        session.wait_visible("body")
        session.sleep(self.cfg.browser.settle_sec)
        state = CapturedState(
            html=session.get_inner_html("html"),
            text=session.get_text("body"),
        )
        log_info(f"   🌐 Rendered {url} ({len(state.text)} chars)")
        return state

    def _locate_tabs(self, session: BrowserSession) -> Tuple[Optional[TabCandidate], Optional[TabCandidate]]:
        try:
            raw = session.evaluate_js(TAB_DISCOVERY_SCRIPT)
        except BrowserDeadlineExceeded:
            raise
        except BrowserRenderFailed as e:
            log_warning(f"Failed to find tabs: {e}")
            return None, None
        return select_billing_tabs(raw, self.cfg.heuristics)

    def _click_with_verification(
        self,
        session: BrowserSession,
        tab: TabCandidate,
        billing_type: str,
        previous_text: str,
    ) -> Optional[CapturedState]:
        """Returns the captured state after a verified click, None after all attempts fail."""
        attempts = self.cfg.browser.max_click_attempts
        for attempt in range(1, attempts + 1):
            try:
                session.click(tab.selector)
                session.sleep(self.cfg.browser.click_settle_sec)
                state = CapturedState(
                    html=session.get_inner_html("html"),
                    text=session.get_text("body"),
                )
            except BrowserDeadlineExceeded:
                raise
            except BrowserRenderFailed as e:
                log_debug(f"click attempt {attempt} failed for {billing_type}: {e}")
                continue

            if self.verify_state_change(session, state.text, previous_text, billing_type):
                log_debug(f"clicked {billing_type} tab (attempt {attempt})")
                return state

            log_debug(f"state did not change after clicking {billing_type} (attempt {attempt})")

        return None

    def _capture_states(self, url: str, warnings: List[str]):
        """Runs the browser part. The session is closed before returning."""
        clicked = {}
        with self.session_factory(self.cfg.browser) as session:
            default = self._load(session, url)

            try:
                tabs = dict(zip(BILLING_SIDES, self._locate_tabs(session)))
                for side in BILLING_SIDES:
                    tab = tabs[side]
                    if tab is None:
                        warnings.append(f"{side}_toggle_not_found")
                        continue
                    log_debug(f"clicking {side} tab: {tab.selector} ({tab.text[:40]!r})")
                    state = self._click_with_verification(session, tab, side, default.text)
                    if state is None:
                        warnings.append(f"{side}_toggle_failed")
                    else:
                        clicked[side] = state
            except BrowserDeadlineExceeded as e:
                log_warning(f"Browser deadline reached, keeping captured states: {e}")
                warnings.append("browser_timeout")

        return default, clicked

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def render_and_extract(self, url: str) -> RenderOutcome:
        """
        Renders the page, captures billing states and re-extracts.

        Raises:
            BrowserRenderFailed: launch/load failure or load deadline
            ExtractionFailed: re-extraction failed
        """
        warnings: List[str] = []
        default, clicked = self._capture_states(url, warnings)

        monthly = clicked.get("monthly")
        yearly = clicked.get("yearly")
        if not (monthly and monthly.text) and not (yearly and yearly.text):
            warnings.append("no_toggle_clicked")

        htmls = [default.html] + [s.html for s in (yearly, monthly) if s]
        script_data = merge_script_data([
            extract_structured_data(h, self.cfg.extraction, self.cfg.heuristics) for h in htmls
        ])

        content = build_browser_content(
            default.text,
            monthly_text=monthly.text if monthly else None,
            yearly_text=yearly.text if yearly else None,
            script_data=script_data,
        )

        result = self.extract_fn(content, url, "browser_extraction")
        plans = deduplicate_plans(result.plans)

        return RenderOutcome(
            plans=plans,
            periods=detect_billing_periods(plans),
            warnings=warnings + list(result.warnings),
        )
