from __future__ import annotations

import pytest

from src.salon_billing.salon_billing.core.enums import GSTScope
from src.salon_billing.salon_billing.core.exceptions import NotFoundError, ValidationError


def test_get_config_creates_default_for_latest_admin(gst_service, gst_repo):
    config = gst_service.get_config()

    assert config.gst_percentage == 7
    assert config.is_active is True
    assert config.applied_to == GSTScope.ALL
    assert config.updated_by == "admin2"
    assert len(gst_repo.history) == 1


def test_get_config_is_idempotent(gst_service, gst_repo):
    assert gst_service.get_config() == gst_service.get_config()
    assert len(gst_repo.history) == 1


def test_get_config_without_admin(gst_service, staff_repo):
    staff_repo.members = []

    with pytest.raises(NotFoundError):
        gst_service.get_config()


def test_update_changes_only_given_fields(gst_service):
    gst_service.update_config(actor_id="admin1", gst_percentage=7, is_active=True, applied_to="services")

    updated = gst_service.update_config(actor_id="admin2", gst_percentage=12.5)

    assert updated.gst_percentage == 12.5
    assert updated.is_active is True
    assert updated.applied_to == GSTScope.SERVICES
    assert updated.updated_by == "admin2"
    assert gst_service.get_config() == updated


def test_update_appends_history(gst_service, gst_repo):
    gst_service.update_config(actor_id="admin1", gst_percentage=5)
    gst_service.update_config(actor_id="admin1", is_active=False)

    assert [c.gst_percentage for c in gst_repo.history] == [5, 5]
    assert gst_repo.history[-1].is_active is False


@pytest.mark.parametrize(
    "changes",
    [{"gst_percentage": -1}, {"gst_percentage": 101}, {"gst_percentage": "abc"}, {"is_active": "yes"}, {"applied_to": "food"}],
)
def test_update_validation(gst_service, gst_repo, changes):
    with pytest.raises(ValidationError):
        gst_service.update_config(actor_id="admin1", **changes)
    assert gst_repo.history == []


def test_update_requires_existing_admin(gst_service):
    with pytest.raises(NotFoundError):
        gst_service.update_config(actor_id="manager1", gst_percentage=5)


def test_effective_percentage(gst_service, gst_repo):
    assert gst_service.effective_percentage() == 0

    gst_service.update_config(actor_id="admin1", gst_percentage=7)
    assert gst_service.effective_percentage() == 7

    gst_service.update_config(actor_id="admin1", is_active=False)
    assert gst_service.effective_percentage() == 0

    gst_repo.broken = True
    assert gst_service.effective_percentage() == 0


def test_billing_view_and_calculate(gst_service):
    assert gst_service.billing_view() == {"gstPercentage": 0, "isActive": False, "appliedTo": None}

    gst_service.update_config(actor_id="admin1", gst_percentage=7)

    assert gst_service.billing_view() == {"gstPercentage": 7, "isActive": True, "appliedTo": "all"}
    assert gst_service.calculate(1000) == {
        "amountBeforeGST": 1000,
        "gstPercentage": 7,
        "gstAmount": 70.0,
        "finalAmount": 1070.0,
    }
    with pytest.raises(ValidationError):
        gst_service.calculate(-1)
