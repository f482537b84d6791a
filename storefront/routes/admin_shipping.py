from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.shipping_region import ShippingRegion
from storefront.schemas.shipping_schemas import ShippingRegionCreate, ShippingRegionUpdate
from storefront.utils.cache_helpers import SHIPPING_REGIONS_KEY, TTLCache, get_config_cache

router = APIRouter()


@router.get("")
def list_regions(
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    return session.exec(
        select(ShippingRegion).order_by(ShippingRegion.sort_order, ShippingRegion.id)
    ).all()


@router.post("")
def create_region(
    data: ShippingRegionCreate,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    admin = Depends(require_admin)
):
    if data.region_key == "local" and not data.states:
        raise HTTPException(400, "A local region needs at least one state")

    region = ShippingRegion(**data.model_dump())
    session.add(region)
    session.commit()
    session.refresh(region)
    cache.delete(SHIPPING_REGIONS_KEY)

    return {"message": "Shipping region created", "region": region}


@router.put("/{region_id}")
def update_region(
    region_id: int,
    data: ShippingRegionUpdate,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    admin = Depends(require_admin)
):
    region = session.get(ShippingRegion, region_id)
    if not region:
        raise HTTPException(404, "Shipping region not found")

    updates = data.model_dump(exclude_unset=True)
    if region.region_key == "local" and not updates.get("states", region.states):
        raise HTTPException(400, "A local region needs at least one state")

    for field, value in updates.items():
        setattr(region, field, value)

    region.updated_at = datetime.utcnow()
    session.add(region)
    session.commit()
    session.refresh(region)
    cache.delete(SHIPPING_REGIONS_KEY)

    return {"message": "Shipping region updated", "region": region}
