import json
from decimal import Decimal
from typing import Dict, List

import requests

from http_session import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, build_session, call_with_backoff
from models import Invoice, PaymentInstruction


XERO_SCOPES = [
    "accounting.transactions",
    "accounting.transactions.read",
    "accounting.reports.read",
    "accounting.reports.tenninetynine.read",
    "accounting.budgets.read",
    "accounting.journals.read",
    "accounting.settings",
    "accounting.settings.read",
    "accounting.contacts",
    "accounting.attachments",
    "accounting.contacts.read",
    "accounting.attachments.read",
]

INVOICE_PAGE_SIZE = 1000


class XeroTokenManager:
    """Custom-connection token acquisition (client_credentials grant)"""

    def __init__(self, client_id: str, client_secret: str, timeout: int = DEFAULT_TIMEOUT):
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.token_url = "https://identity.xero.com/connect/token"

    def fetch_access_token(self) -> str:
        data = {
            "grant_type": "client_credentials",
            "scope": " ".join(XERO_SCOPES),
        }
        print("🔄 Requesting Xero access token...")
        print(f"  - Client ID: {self.client_id[:6]}... (length: {len(self.client_id)})")

        try:
            response = requests.post(
                self.token_url,
                data=data,
                auth=(self.client_id, self.client_secret),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            print(f"❌ Xero token request failed: {e}")
            if response.status_code in (400, 401):
                print("\n⚠️  Possible causes:")
                print("  1. XERO_CLIENT_ID or XERO_CLIENT_SECRET is wrong")
                print("  2. The app is not a Custom Connection, or it has not been authorised")
            raise

        token = response.json().get("access_token")
        if not token:
            raise RuntimeError("Xero token response did not contain an access_token")
        print("✅ Obtained Xero access token")
        return token


class XeroClient:
    """Xero Accounting API client"""

    def __init__(
        self,
        access_token: str,
        tenant_id: str,
        page_size: int = INVOICE_PAGE_SIZE,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        session=None,
    ):
        self.base_url = "https://api.xero.com/api.xro/2.0"
        self.page_size = page_size
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or build_session({
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/json",
            "Xero-Tenant-Id": tenant_id,
        })

    def get_invoices(self) -> List[Invoice]:
        """Authorised and paid invoices, in the order Xero returns them"""
        response = call_with_backoff(
            self.session,
            "GET",
            f"{self.base_url}/Invoices",
            params={"Statuses": "AUTHORISED,PAID", "pageSize": str(self.page_size)},
            timeout=self.timeout,
            max_retries=self.max_retries,
        )
        # Decimal straight from the JSON text, never via float
        body = json.loads(response.text, parse_float=Decimal)
        invoices = [Invoice.from_api(i) for i in body.get("Invoices", [])]

        print(f"   Retrieved {len(invoices)} invoices")
        if len(invoices) == self.page_size:
            print("   ⚠️ Warning: invoice count matches page size; run again after this")
        return invoices

    def submit_payments(self, instructions: List[PaymentInstruction]) -> Dict:
        if not instructions:
            return {}
        response = call_with_backoff(
            self.session,
            "PUT",
            f"{self.base_url}/Payments",
            json={"Payments": [p.to_payload() for p in instructions]},
            timeout=self.timeout,
            max_retries=self.max_retries,
            idempotent=False,
        )
        return response.json()
