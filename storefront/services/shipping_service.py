from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from storefront.models.shipping_region import ShippingRegion
from storefront.services.gst_calculations import ShippingConfig
from storefront.utils.money import round_money

LOCAL_REGION = "local"
REST_OF_INDIA_REGION = "rest_of_india"
REGION_KEYS = (LOCAL_REGION, REST_OF_INDIA_REGION)


class ShippingNotConfigured(Exception):
    def __init__(self, state: str):
        self.state = state
        super().__init__(f"Delivery is not available for {state or 'this address'}")


@dataclass(frozen=True)
class RegionRule:
    """Detached copy of a ShippingRegion row, safe to keep in a cache."""
    region_key: str
    region_name: str
    states: Tuple[str, ...]
    base_charge: Decimal
    free_delivery_above: Optional[Decimal]
    is_enabled: bool
    sort_order: int = 0

    @classmethod
    def from_model(cls, region: ShippingRegion) -> "RegionRule":
        return cls(
            region_key=region.region_key,
            region_name=region.region_name,
            states=tuple(region.states or ()),
            base_charge=round_money(region.base_charge),
            free_delivery_above=(
                round_money(region.free_delivery_above)
                if region.free_delivery_above is not None
                else None
            ),
            is_enabled=region.is_enabled,
            sort_order=region.sort_order,
        )

    def covers(self, state: str) -> bool:
        wanted = (state or "").strip().lower()
        return any(s.strip().lower() == wanted for s in self.states)

    def to_config(self) -> ShippingConfig:
        # a zero threshold means "no free delivery", same as the admin form
        free_above = self.free_delivery_above if self.free_delivery_above else None
        return ShippingConfig(base_charge=self.base_charge, free_above=free_above)


def load_region_rules(session: Session) -> List[RegionRule]:
    regions = session.exec(
        select(ShippingRegion).order_by(ShippingRegion.sort_order, ShippingRegion.id)
    ).all()
    return [RegionRule.from_model(r) for r in regions]


def resolve_shipping_config(state: str, regions: Sequence[RegionRule]) -> ShippingConfig:
    """The local region applies when it lists the state; otherwise rest of India."""
    enabled = [r for r in regions if r.is_enabled]

    for region in enabled:
        if region.region_key == LOCAL_REGION and region.covers(state):
            return region.to_config()

    for region in enabled:
        if region.region_key == REST_OF_INDIA_REGION:
            return region.to_config()

    raise ShippingNotConfigured(state)
