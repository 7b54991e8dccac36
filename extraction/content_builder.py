"""
Content Builder - Extraction Input Assembly
===========================================
Static pass:   visible text + hidden content + script data
Browser pass:  one section per captured billing state + script data

Section markers are part of the prompt contract; the model is told what
each one means.
"""

from typing import List, Optional

from scrapers.page_parser import PageContent


HIDDEN_MARKER = "--- HIDDEN CONTENT (may contain alternate billing) ---"
SCRIPT_MARKER = "--- SCRIPT DATA ---"
MONTHLY_STATE_MARKER = "=== MONTHLY BILLING STATE (after clicking monthly tab) ==="
YEARLY_STATE_MARKER = "=== YEARLY/ANNUAL BILLING STATE (after clicking yearly tab) ==="
DEFAULT_STATE_MARKER = "=== DEFAULT STATE (no tabs clicked) ==="


def build_static_content(page: PageContent) -> str:
    """Combined content for the static extraction pass."""
    content = page.visible_text
    if page.hidden_text:
        content += f"\n\n{HIDDEN_MARKER}\n{page.hidden_text}"
    if page.structured_data:
        content += f"\n\n{SCRIPT_MARKER}\n{page.structured_data}"
    return content


def merge_script_data(blocks: List[str]) -> str:
    """Joins script data from several captures, dropping repeated lines."""
    seen = set()
    lines = []
    for block in blocks:
        for line in (block or "").splitlines():
            if line and line not in seen:
                seen.add(line)
                lines.append(line)
    return "\n".join(lines)


def build_browser_content(
    default_text: str,
    monthly_text: Optional[str] = None,
    yearly_text: Optional[str] = None,
    script_data: str = "",
) -> str:
    """
    Combined content for the browser re-extraction pass.

    monthly_text / yearly_text are only passed for verified clicks. With
    neither, the default state is used.
    """
    parts = []
    if monthly_text:
        parts.append(f"{MONTHLY_STATE_MARKER}\n{monthly_text}\n\n")
    if yearly_text:
        parts.append(f"{YEARLY_STATE_MARKER}\n{yearly_text}\n\n")
    if not parts:
        parts.append(f"{DEFAULT_STATE_MARKER}\n{default_text}")

    content = "".join(parts)
    if script_data:
        content += f"\n\n{SCRIPT_MARKER}\n{script_data}"
    return content
