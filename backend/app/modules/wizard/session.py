from typing import Any, Iterable, Mapping, Optional
from enum import Enum
from app.core.tenant import TenantContext
from app.models.property import AmenityKey, ListingFormData, LocalImage, WizardStep, WIZARD_STEPS
from app.modules.wizard import form_state
from app.modules.wizard.service import ListingPersistenceError, ListingWizardService
from app.modules.wizard.steps import StepSequencer
import logging

logger = logging.getLogger(__name__)


class WizardMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class ListingWizard:
    """
    State behind the create/edit listing modal.

    Edit mode loads the listing once when opened; edits are ignored until
    that load has finished. Submitting is only possible from the last step
    and closes the wizard on success.
    """

    def __init__(
        self,
        service: ListingWizardService,
        tenant: TenantContext,
        mode: WizardMode = WizardMode.CREATE,
        listing_id: Optional[str] = None,
    ):
        if mode == WizardMode.EDIT and not listing_id:
            raise ValueError("Edit mode requires a listing_id")

        self.service = service
        self.tenant = tenant
        self.mode = mode
        self.listing_id = listing_id
        self.steps: StepSequencer[WizardStep] = StepSequencer(
            WIZARD_STEPS, unrestricted_jump=mode == WizardMode.EDIT
        )
        self.form = ListingFormData()
        self.is_open = False
        self.loaded = False
        self.submitting = False
        self.error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.is_open and (self.mode == WizardMode.CREATE or self.loaded)

    async def open(self):
        self.is_open = True
        if self.mode != WizardMode.EDIT or self.loaded:
            return

        self.form = await self.service.load_form(self.tenant, self.listing_id)
        self.loaded = True

    def close(self):
        self.form = ListingFormData()
        self.steps.reset()
        self.error = None
        self.is_open = False
        self.loaded = False

    def _edit(self, change, *args) -> ListingFormData:
        if not self.ready:
            logger.debug("Ignoring form edit before the wizard is ready")
            return self.form
        self.form = change(self.form, *args)
        return self.form

    def update(self, patch: Mapping[str, Any]) -> ListingFormData:
        return self._edit(form_state.apply_patch, patch)

    def add_images(self, images: Iterable[LocalImage]) -> ListingFormData:
        return self._edit(form_state.add_images, list(images))

    def remove_image(self, image_id: str) -> ListingFormData:
        return self._edit(form_state.remove_image, image_id)

    def set_primary(self, image_id: str) -> ListingFormData:
        return self._edit(form_state.set_primary, image_id)

    def mark_for_deletion(self, image_id: str) -> ListingFormData:
        return self._edit(form_state.mark_for_deletion, image_id)

    def restore_image(self, image_id: str) -> ListingFormData:
        return self._edit(form_state.restore_image, image_id)

    def set_amenity(self, amenity: AmenityKey, value: Optional[bool]) -> ListingFormData:
        return self._edit(form_state.set_amenity, amenity, value)

    # Navigation
    def next(self) -> WizardStep:
        return self.steps.next()

    def skip(self) -> WizardStep:
        return self.steps.skip()

    def previous(self) -> WizardStep:
        return self.steps.previous()

    def jump_to(self, step: WizardStep) -> WizardStep:
        return self.steps.jump_to(step)

    async def submit(self) -> Optional[str]:
        """Persist the form; returns the listing id, or None if nothing was saved"""
        if not self.ready or not self.steps.is_last or self.submitting:
            return None

        self.submitting = True
        self.error = None
        try:
            if self.mode == WizardMode.EDIT:
                listing_id = await self.service.update_listing(self.tenant, self.listing_id, self.form)
            else:
                listing_id = await self.service.create_listing(self.tenant, self.form)
        except ListingPersistenceError as e:
            self.error = str(e)
            return None
        finally:
            self.submitting = False

        self.close()
        return listing_id
