import argparse
import re
import sys
from datetime import date
from functools import partial
from typing import List, Optional

import requests
import yaml
from dotenv import load_dotenv

from config_loader import ConfigError, load_credentials, load_settings
from disambiguation import console_prompt, resolve_ambiguous_match
from environment_validator import EnvironmentValidator
from reconciler import build_payment_instructions, make_exclusion_predicate, reconcile
from report import print_progress
from square_client import SquareClient
from xero_client import XeroClient, XeroTokenManager


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cashtx",
        description="Match Square cash-drawer payouts to unpaid Xero bills and record the payments",
    )
    parser.add_argument("-s", "--since", required=True, type=date.fromisoformat,
                        help="first shift date to process (YYYY-MM-DD)")
    parser.add_argument("--exclusions", default=None,
                        help="regex; payouts whose lower-cased description matches are skipped "
                             "(default: $SQUARE_SHIFT_EVENT_DESCRIPTION_EXCLUSIONS_PATTERN)")
    parser.add_argument("--config", default=None, help="YAML settings file (default: config/cashtx.yml)")
    parser.add_argument("--dry-run", action="store_true", help="match and report, but do not submit payments")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    try:
        settings = load_settings(args.config)
    except (ConfigError, yaml.YAMLError) as e:
        print(f"❌ Invalid settings file: {e}")
        return 2

    if not EnvironmentValidator().validate_all():
        return 2
    creds = load_credentials()

    exclusions = args.exclusions if args.exclusions is not None else creds["exclusions"]
    try:
        is_excluded = make_exclusion_predicate(exclusions)
    except re.error as e:
        print(f"❌ Invalid exclusion pattern {exclusions!r}: {e}")
        return 2

    http = settings["http"]
    square = SquareClient(
        creds["square_access_token"],
        creds["square_location_id"],
        api_version=settings["square"]["api_version"],
        timeout=http["timeout_seconds"],
        max_retries=http["max_retries"],
    )
    try:
        access_token = XeroTokenManager(
            creds["xero_client_id"], creds["xero_client_secret"], timeout=http["timeout_seconds"]
        ).fetch_access_token()
    except (requests.RequestException, RuntimeError) as e:
        print(f"❌ Failed to authenticate with Xero: {e}")
        return 1
    xero = XeroClient(
        access_token,
        creds["xero_tenant_id"],
        page_size=settings["xero"]["invoice_page_size"],
        timeout=http["timeout_seconds"],
        max_retries=http["max_retries"],
    )

    print()
    if exclusions:
        print(f"   Excluding shift events matching: {exclusions}")

    try:
        invoices = xero.get_invoices()
    except requests.RequestException as e:
        print(f"❌ Failed to get invoices: {e}")
        return 1

    try:
        shifts = square.list_shifts(args.since)
    except requests.RequestException as e:
        print(f"❌ Failed to get shifts: {e}")
        return 1

    print(f"   Processing {len(shifts)} shifts...")
    resolver = partial(resolve_ambiguous_match, prompt=console_prompt)
    try:
        result = reconcile(
            square.iter_closed_shift_events(shifts),
            invoices,
            resolver,
            is_excluded=is_excluded,
            threshold=settings["matching"]["similarity_threshold"],
        )
    except requests.RequestException as e:
        print(f"❌ Failed to get shift events: {e}")
        return 1

    print_progress(result)

    instructions = build_payment_instructions(
        result.matched,
        creds["xero_payment_account_code"],
        reference=settings["payments"]["reference"],
    )
    if not instructions:
        print("   Done, no payments needed to be submitted")
        return 0

    if args.dry_run:
        print(f"   *** DRY RUN: {len(instructions)} payment(s) not submitted ***")
        return 0

    try:
        xero.submit_payments(instructions)
    except requests.RequestException as e:
        print(f"❌ Failed to submit payments: {e}")
        return 1

    print(f"✅ {len(instructions)} payment(s) submitted successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
