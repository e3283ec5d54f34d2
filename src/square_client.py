from datetime import date
from typing import Dict, Iterator, List, Optional, Tuple

from http_session import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT, build_session, call_with_backoff
from models import Shift, ShiftEvent, ShiftState


SQUARE_API_VERSION = "2025-10-16"


class SquareClient:
    """Square cash-drawer API client"""

    def __init__(
        self,
        access_token: str,
        location_id: str,
        api_version: str = SQUARE_API_VERSION,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        session=None,
    ):
        self.location_id = location_id
        self.base_url = "https://connect.squareup.com/v2"
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = session or build_session({
            "Authorization": f"Bearer {access_token}",
            "Square-Version": api_version,
            "Content-Type": "application/json",
        })

    def _get_paginated(self, url: str, params: Dict, key: str) -> List[Dict]:
        items: List[Dict] = []
        cursor: Optional[str] = None
        while True:
            page_params = dict(params)
            if cursor:
                page_params["cursor"] = cursor
            response = call_with_backoff(
                self.session, "GET", url, params=page_params,
                timeout=self.timeout, max_retries=self.max_retries,
            )
            body = response.json()
            items.extend(body.get(key, []))
            cursor = body.get("cursor")
            if not cursor:
                return items

    def list_shifts(self, since: date) -> List[Shift]:
        """Cash-drawer shifts opened on or after ``since``"""
        url = f"{self.base_url}/cash-drawers/shifts"
        params = {
            "location_id": self.location_id,
            "begin_time": since.strftime("%Y-%m-%dT00:00:00.0000"),
        }
        return [Shift.from_api(s) for s in self._get_paginated(url, params, "cash_drawer_shifts")]

    def list_shift_events(self, shift_id: str) -> List[ShiftEvent]:
        url = f"{self.base_url}/cash-drawers/shifts/{shift_id}/events"
        params = {"location_id": self.location_id}
        return [ShiftEvent.from_api(e) for e in self._get_paginated(url, params, "cash_drawer_shift_events")]

    def iter_closed_shift_events(self, shifts: List[Shift]) -> Iterator[Tuple[Shift, List[ShiftEvent]]]:
        """Fetch events lazily, only for closed shifts."""
        for shift in shifts:
            if shift.state != ShiftState.CLOSED:
                continue
            yield shift, self.list_shift_events(shift.shift_id)
