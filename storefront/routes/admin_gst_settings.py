from datetime import datetime
from fastapi import APIRouter, Depends
from sqlmodel import Session
from storefront.database import get_session
from storefront.dependencies.admin import require_admin
from storefront.models.gst_settings import GSTSettings
from storefront.schemas.gst_schemas import GSTSettingsUpdate
from storefront.services.pricing_service import load_tax_profile
from storefront.utils.cache_helpers import GST_SETTINGS_KEY, TTLCache, get_config_cache
from storefront.utils.formatters import gst_rate_description

router = APIRouter()


@router.get("")
def get_gst_settings(
    session: Session = Depends(get_session),
    admin = Depends(require_admin)
):
    profile = load_tax_profile(session)

    return {
        "business_name": profile.business_name,
        "business_address": profile.business_address,
        "state": profile.state,
        "gst_number": profile.gst_number,
        "gst_enabled": profile.gst_enabled,
        "supported_gst_rates": [
            {"rate": rate, "description": gst_rate_description(rate)}
            for rate in profile.supported_rates
        ],
    }


@router.put("")
def update_gst_settings(
    data: GSTSettingsUpdate,
    session: Session = Depends(get_session),
    cache: TTLCache = Depends(get_config_cache),
    admin = Depends(require_admin)
):
    row = session.get(GSTSettings, 1)

    if not row:
        row = GSTSettings(id=1, state=data.state)
        session.add(row)

    for field, value in data.model_dump().items():
        setattr(row, field, value)

    row.updated_at = datetime.utcnow()
    session.commit()
    session.refresh(row)
    cache.delete(GST_SETTINGS_KEY)

    return {"message": "GST settings updated successfully", "data": row}
