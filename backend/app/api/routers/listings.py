from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.storage import ObjectStorage, get_object_storage
from app.core.tenant import TenantContext, get_tenant_context
from app.api.routers.search import invalidate_search_cache
from app.models.property import ListingFormData
from app.modules.wizard.form_state import normalize_primary
from app.modules.wizard.service import (
    ListingNotFoundError, ListingPersistenceError, ListingWizardService
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def get_listing_service(
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_object_storage),
) -> ListingWizardService:
    return ListingWizardService(db, storage)

def _not_found(listing_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Listing {listing_id} not found"
    )

@router.get("/{listing_id}/form", response_model=ListingFormData)
async def get_listing_form(
    listing_id: str,
    tenant: TenantContext = Depends(get_tenant_context),
    service: ListingWizardService = Depends(get_listing_service)
):
    """Listing staged as wizard form data, for edit mode"""
    try:
        return await service.load_form(tenant, listing_id)
    except ListingNotFoundError:
        raise _not_found(listing_id)

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_listing(
    form: ListingFormData,
    tenant: TenantContext = Depends(get_tenant_context),
    service: ListingWizardService = Depends(get_listing_service)
):
    """Create a draft listing from a submitted wizard form"""
    if tenant.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-User-Id header is required to create listings"
        )

    try:
        listing_id = await service.create_listing(tenant, normalize_primary(form))
        await invalidate_search_cache(tenant.organisation_id)
        return {"id": listing_id}
    except ListingPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

@router.put("/{listing_id}")
async def update_listing(
    listing_id: str,
    form: ListingFormData,
    tenant: TenantContext = Depends(get_tenant_context),
    service: ListingWizardService = Depends(get_listing_service)
):
    """Apply an edited wizard form to an existing listing"""
    try:
        await service.update_listing(tenant, listing_id, normalize_primary(form))
        await invalidate_search_cache(tenant.organisation_id)
        return {"id": listing_id}
    except ListingNotFoundError:
        raise _not_found(listing_id)
    except ListingPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )

@router.post("/{listing_id}/status")
async def toggle_listing_status(
    listing_id: str,
    tenant: TenantContext = Depends(get_tenant_context),
    service: ListingWizardService = Depends(get_listing_service)
):
    """Flip a listing between draft and active"""
    try:
        new_status = await service.toggle_status(tenant, listing_id)
        await invalidate_search_cache(tenant.organisation_id)
        return {"id": listing_id, "status": new_status.value}
    except ListingNotFoundError:
        raise _not_found(listing_id)
    except ListingPersistenceError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
