"""
Pricing Scout - Command Line Entry Point
========================================
Commands:
    discover <url>                      rank candidate pricing pages
    extract <url> [--no-browser]        extract plans from a pricing page
            [--save --user <uuid>] [--json]
    saved --user <uuid>                 list saved plans

Pipeline Steps (extract):
1. Load config (+ .env for API keys)
2. Static fetch + parse, AI extraction
3. Toggle detection, browser pass when needed
4. Optionally save plans to PostgreSQL
"""

import argparse
import json
import sys

from config import load_config, print_config_summary
from core.ai_client import create_ai_client
from pipeline.pipeline_runner import PricingPipeline
from utils_logging import log_error, set_log_level


def _print_discover(response):
    if response.error:
        log_error(response.error)
        return
    print(f"\n🔎 Pricing candidates ({len(response.pricing_candidates)}):")
    for i, url in enumerate(response.pricing_candidates, 1):
        marker = "→" if url == response.selected_pricing_url else " "
        print(f"  {marker} {i}. {url}")


def _print_extract(response):
    if response.error:
        log_error(response.error)
    else:
        print(f"\n💰 {len(response.plans)} plans from {response.source_url}")
        print(f"   Periods: {', '.join(response.detected_periods) or 'none'}")
        print(f"   Browser render: {'used' if response.render_used else 'not used'}"
              f"{' (still needed)' if response.needs_render else ''}")
        for plan in response.plans:
            price = plan.price_string or (f"{plan.price_amount}" if plan.price_amount is not None else "n/a")
            line = f"   - {plan.name}: {price} [{plan.billing_period.value}]"
            if plan.monthly_equivalent_amount is not None:
                line += f" (≈{plan.monthly_equivalent_amount}/mo)"
            if plan.annual_billed_amount is not None:
                line += f" (billed {plan.annual_billed_amount}/yr)"
            print(line)
    if response.warnings:
        print(f"   ⚠️ Warnings: {', '.join(response.warnings)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pricing-scout", description="Competitor pricing page discovery & extraction")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--log-level", choices=["silent", "error", "info", "debug"], help="Override config log level")
    sub = parser.add_subparsers(dest="command", required=True)

    p_discover = sub.add_parser("discover", help="Find pricing page candidates")
    p_discover.add_argument("url", nargs="?", default="", help="Website URL (default from config)")
    p_discover.add_argument("--json", action="store_true", help="Print JSON response")

    p_extract = sub.add_parser("extract", help="Extract plans from a pricing page")
    p_extract.add_argument("url", help="Pricing page URL")
    p_extract.add_argument("--no-browser", action="store_true", help="Skip the browser pass")
    p_extract.add_argument("--save", action="store_true", help="Save plans to PostgreSQL")
    p_extract.add_argument("--user", help="User UUID (required with --save)")
    p_extract.add_argument("--website", default="", help="Website URL stored with saved plans")
    p_extract.add_argument("--json", action="store_true", help="Print JSON response")

    p_saved = sub.add_parser("saved", help="List saved plans")
    p_saved.add_argument("--user", required=True, help="User UUID")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    cfg = load_config(args.config)
    set_log_level(args.log_level or cfg.general.log_level)
    if getattr(args, "json", False) and not args.log_level:
        # keep stdout parseable
        set_log_level("silent")

    if args.command == "saved":
        import db_pg
        conn = db_pg.get_conn(cfg.pg)
        try:
            db_pg.ensure_schema(conn)
            try:
                saved = db_pg.get_saved_plans(conn, args.user)
            except ValueError as e:
                log_error(str(e))
                return 2
        finally:
            conn.close()
        print(json.dumps({"plans": saved.plans, "count": saved.count}, indent=2, ensure_ascii=False))
        return 0

    if args.command == "extract" and args.save and not args.user:
        log_error("--save requires --user <uuid>")
        return 2

    if not getattr(args, "json", False):
        print_config_summary(cfg)

    if args.command == "discover":
        pipeline = PricingPipeline(cfg)
        response = pipeline.discover_pricing_page(args.url)
        if args.json:
            print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
        else:
            _print_discover(response)
        return 1 if response.error else 0

    # extract
    pipeline = PricingPipeline(cfg, ai_client=create_ai_client(cfg.ai))
    response = pipeline.extract_pricing(args.url, use_browser=not args.no_browser)
    if args.json:
        print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_extract(response)

    if response.error:
        return 1

    if args.save:
        import db_pg
        conn = db_pg.get_conn(cfg.pg)
        try:
            db_pg.ensure_schema(conn)
            saved = db_pg.save_plans(conn, args.user, args.website or args.url, response.source_url, response.plans)
        finally:
            conn.close()
        if saved.error:
            log_error(saved.error)
            return 1
        print(f"💾 Saved {saved.saved_count} plans")

    return 0


if __name__ == "__main__":
    sys.exit(main())
