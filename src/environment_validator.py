"""
Environment check for cashtx

Run before any network call so a missing credential fails fast with a
remediation guide instead of an HTTP 401 halfway through a run.
"""

import os
import re
from typing import Dict, List, Optional


class EnvironmentValidator:
    """Checks that required environment variables are present and well-formed"""

    REQUIRED_VARS = {
        "SQUARE_LOCATION_ID": {
            "description": "Square location the cash drawers belong to",
            "pattern": r"^[A-Za-z0-9]+$",
            "example": "L1A2B3C4D5E6F",
        },
        "SQUARE_ACCESS_TOKEN": {
            "description": "Square personal access token",
            "pattern": r"^\S{20,}$",
            "example": "EAAAl...",
        },
        "XERO_CLIENT_ID": {
            "description": "Xero Custom Connection client ID",
            "pattern": r"^[A-Za-z0-9]{32}$",
            "example": "0123456789ABCDEF0123456789ABCDEF",
        },
        "XERO_CLIENT_SECRET": {
            "description": "Xero Custom Connection client secret",
            "pattern": r"^\S{20,}$",
            "example": "abcDEF123...",
        },
        "XERO_TENANT_ID": {
            "description": "Xero organisation (tenant) ID",
            "pattern": r"^[0-9a-fA-F-]{36}$",
            "example": "00000000-0000-0000-0000-000000000000",
        },
        "XERO_PAYMENT_ACCOUNT_CODE": {
            "description": "Xero account code the cash payments are made from",
            "pattern": r"^\S+$",
            "example": "090",
        },
    }

    OPTIONAL_VARS = {
        "SQUARE_APP_ID": {
            "description": "Square application ID",
            "pattern": r"^\S+$",
        },
        "SQUARE_SHIFT_EVENT_DESCRIPTION_EXCLUSIONS_PATTERN": {
            "description": "Regex; matching payout descriptions are skipped",
            "pattern": r"^.*$",
        },
    }

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = os.environ if environ is None else environ
        self.missing_vars: List[str] = []
        self.invalid_vars: List[str] = []

    def validate_all(self) -> bool:
        print("\n🔍 Checking environment")

        for var_name, config in self.REQUIRED_VARS.items():
            value = self.environ.get(var_name)
            if not value:
                self.missing_vars.append(var_name)
                print(f"  ❌ {var_name}: not set")
            elif not re.match(config["pattern"], value):
                # format drift is only a warning: the APIs are the final judge
                self.invalid_vars.append(var_name)
                print(f"  ⚠️  {var_name}: set (unexpected format)")
            else:
                print(f"  ✅ {var_name}: set")

        for var_name in self.OPTIONAL_VARS:
            if self.environ.get(var_name):
                print(f"  ✅ {var_name}: set")
            else:
                print(f"  ⚪ {var_name}: not set (optional)")

        if self.missing_vars:
            self._display_remediation_guide()
            return False
        return True

    def _display_remediation_guide(self):
        print("\n🔧 Missing required variables:")
        for var in self.missing_vars:
            config = self.REQUIRED_VARS[var]
            print(f"\n  {var}:")
            print(f"    {config['description']}")
            print(f"    e.g. {var}={config['example']}")
        print("\n💡 Add them to .env (see .env.example) or export them, then re-run.")
