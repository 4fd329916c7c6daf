"""
Deal catalog loader.

The catalog is a local JSON file (default: `data/catalogs/deals.json`) with two lists:
`deals` and `locations`. Locations belong to merchant accounts (`account_id`); a deal
without embedded locations is redeemable at every location of its account. We validate
everything into typed Pydantic models so the proximity code can assume a consistent shape.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import TypeAdapter

from dealradius.core.env import resolve_project_path
from dealradius.domain.models import Deal, LocationRecord

logger = logging.getLogger(__name__)

_DEALS_ADAPTER = TypeAdapter(list[Deal])
_LOCATIONS_ADAPTER = TypeAdapter(list[LocationRecord])


@dataclass(frozen=True)
class Catalog:
    deals: list[Deal]
    locations_by_account: dict[str, list[LocationRecord]] = field(default_factory=dict)

    def get_deal(self, deal_id: str) -> Deal | None:
        for deal in self.deals:
            if deal.id == deal_id:
                return deal
        return None

    def locations_for(self, deal: Deal) -> list[LocationRecord]:
        """Embedded locations win; otherwise fall back to the deal's account locations."""
        if deal.locations:
            return deal.locations
        if not deal.account_id:
            return []
        return self.locations_by_account.get(deal.account_id, [])


def _group_by_account(locations: list[LocationRecord]) -> dict[str, list[LocationRecord]]:
    out: dict[str, list[LocationRecord]] = {}
    for loc in locations:
        if loc.account_id:
            out.setdefault(loc.account_id, []).append(loc)
    return out


def load_catalog(path: str | Path) -> Catalog:
    """Load and validate a deal catalog JSON file."""
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Invalid catalog root in {resolved}; expected an object with 'deals'.")

    deals = _DEALS_ADAPTER.validate_python(payload.get("deals") or [])
    locations = _LOCATIONS_ADAPTER.validate_python(payload.get("locations") or [])
    logger.info("Loaded catalog %s: %d deals, %d locations", resolved, len(deals), len(locations))
    return Catalog(deals=deals, locations_by_account=_group_by_account(locations))
