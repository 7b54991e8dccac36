"""
Request Logger - Per-Request Step Tracking
==========================================
Step trail for one discovery or extraction request.

CRITICAL: Transparent record of every escalation (static -> browser)
and every AI call with its estimated cost.
"""

from datetime import datetime
from typing import Any, Dict, List

from utils_logging import LOG_LEVEL_DEBUG, get_log_level


class RequestLog:
    """Step trail for one request."""

    def __init__(self, operation: str, url: str):
        self.operation = operation
        self.url = url
        self.started_at = datetime.now()
        self.steps: List[Dict[str, Any]] = []
        self.ai_calls: List[Dict[str, Any]] = []
        self.warnings: List[str] = []
        self.cost_usd = 0.0

    def log_step(self, step_name: str, **kwargs):
        """Log a pipeline step."""
        self.steps.append({
            "step": step_name,
            "timestamp": datetime.now().isoformat(),
            **kwargs
        })

    def log_ai_call(self, purpose: str, model: str, cost_usd: float):
        """Log an AI call with cost."""
        self.ai_calls.append({
            "purpose": purpose,
            "model": model,
            "cost_usd": cost_usd,
            "timestamp": datetime.now().isoformat()
        })
        self.cost_usd += cost_usd

    def log_warning(self, code: str):
        self.warnings.append(code)
        self.log_step("warning", code=code)

    def summary(self) -> Dict[str, Any]:
        """Generate summary of processing."""
        return {
            "operation": self.operation,
            "url": self.url,
            "duration_sec": round((datetime.now() - self.started_at).total_seconds(), 2),
            "total_steps": len(self.steps),
            "ai_calls": len(self.ai_calls),
            "cost_usd": round(self.cost_usd, 4),
            "warnings": list(self.warnings),
            "steps": self.steps,
        }

    def print_summary(self, force: bool = False):
        """Print human-readable summary (debug level unless forced)."""
        if not force and get_log_level() < LOG_LEVEL_DEBUG:
            return
        s = self.summary()
        print(f"\n{'='*60}")
        print(f"{self.operation}: {self.url}")
        print(f"{'='*60}")
        print(f"Duration: {s['duration_sec']}s")
        print(f"Steps: {s['total_steps']}")
        print(f"AI Calls: {s['ai_calls']} (${s['cost_usd']:.4f})")
        if self.warnings:
            print(f"Warnings: {', '.join(self.warnings)}")

        if self.steps:
            print(f"\nSteps:")
            for step in self.steps:
                details = {k: v for k, v in step.items() if k not in ("step", "timestamp")}
                print(f"  - {step['step']}: {details or 'N/A'}")
