import pytest
from unittest.mock import AsyncMock, MagicMock
from app.models.property import ListingFormData, LocalImage, WizardStep, WIZARD_STEPS
from app.modules.wizard.service import ListingPersistenceError, ListingWizardService
from app.modules.wizard.session import ListingWizard, WizardMode


def photo(image_id):
    return LocalImage(id=image_id, filename=f"{image_id}.jpg", data=b"\xff\xd8")


def walk_to_last(wizard):
    for _ in WIZARD_STEPS[1:]:
        wizard.next()


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.create_listing = AsyncMock(return_value="new-listing")
    service.update_listing = AsyncMock(return_value="listing-edit")
    service.load_form = AsyncMock(return_value=ListingFormData(suburb="Springfield", bedrooms="4"))
    return service


class TestListingWizard:
    """Test wizard gating, navigation and submission"""

    def test_edit_mode_requires_listing_id(self, mock_service, tenant):
        with pytest.raises(ValueError):
            ListingWizard(mock_service, tenant, WizardMode.EDIT)

    def test_edits_ignored_until_open(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant)
        wizard.update({"suburb": "Springfield"})

        assert wizard.form.suburb == ""

    @pytest.mark.asyncio
    async def test_edit_mode_loads_once(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant, WizardMode.EDIT, "listing-edit")
        assert not wizard.ready

        await wizard.open()
        await wizard.open()

        assert wizard.ready
        assert wizard.form.bedrooms == "4"
        mock_service.load_form.assert_awaited_once_with(tenant, "listing-edit")

    @pytest.mark.asyncio
    async def test_create_mode_jumps_only_backwards(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant)
        await wizard.open()

        assert wizard.jump_to(WizardStep.REVIEW) == WizardStep.MEDIA
        wizard.next()
        wizard.next()
        assert wizard.jump_to(WizardStep.MEDIA) == WizardStep.MEDIA

    @pytest.mark.asyncio
    async def test_edit_mode_jumps_anywhere(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant, WizardMode.EDIT, "listing-edit")
        await wizard.open()

        assert wizard.jump_to(WizardStep.REVIEW) == WizardStep.REVIEW
        assert wizard.jump_to(WizardStep.ROOMS) == WizardStep.ROOMS

    @pytest.mark.asyncio
    async def test_submit_only_from_last_step(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant)
        await wizard.open()
        wizard.update({"suburb": "Springfield"})

        assert await wizard.submit() is None
        mock_service.create_listing.assert_not_awaited()

        walk_to_last(wizard)
        assert await wizard.submit() == "new-listing"

        submitted_form = mock_service.create_listing.await_args.args[1]
        assert submitted_form.suburb == "Springfield"
        assert not wizard.is_open
        assert wizard.form == ListingFormData()
        assert wizard.steps.current_step == WizardStep.MEDIA

    @pytest.mark.asyncio
    async def test_failed_submit_keeps_form_and_error(self, mock_service, tenant):
        mock_service.create_listing.side_effect = ListingPersistenceError("Failed to create property: disk full")
        wizard = ListingWizard(mock_service, tenant)
        await wizard.open()
        wizard.add_images([photo("a")])
        walk_to_last(wizard)

        assert await wizard.submit() is None

        assert wizard.error == "Failed to create property: disk full"
        assert wizard.is_open
        assert wizard.submitting is False
        assert [img.id for img in wizard.form.images] == ["a"]

    @pytest.mark.asyncio
    async def test_edit_submit_updates_listing(self, mock_service, tenant):
        wizard = ListingWizard(mock_service, tenant, WizardMode.EDIT, "listing-edit")
        await wizard.open()
        wizard.jump_to(WizardStep.REVIEW)

        assert await wizard.submit() == "listing-edit"
        mock_service.update_listing.assert_awaited_once()
        mock_service.create_listing.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_end_to_end_create(self, test_db_session, fake_storage, tenant):
        wizard = ListingWizard(ListingWizardService(test_db_session, fake_storage), tenant)
        await wizard.open()
        wizard.add_images([photo("front"), photo("back")])
        wizard.set_primary("back")
        wizard.next()
        wizard.update({"suburb": "Springfield", "address_line_1": "742 Evergreen Terrace"})
        walk_to_last(wizard)

        listing_id = await wizard.submit()

        assert listing_id is not None
        assert len(fake_storage.objects) == 2
