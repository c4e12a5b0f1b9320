from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from ..billing.calculator.base import BillCalculator
from ..billing.calculator.standard_calculator import StandardBillCalculator
from ..common.datetime_utils import now_local
from ..common.validators import require_choice, require_number
from ..core.constants import DEFAULT_GST_PERCENTAGE
from ..core.enums import GSTScope
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import StaffRepository
from .model import GSTConfig
from .repository import GSTConfigRepository

logger = logging.getLogger(__name__)


class GSTService:
    def __init__(
        self,
        configs: GSTConfigRepository,
        staff: StaffRepository,
        *,
        calculator: Optional[BillCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._configs = configs
        self._staff = staff
        self._calculator = calculator or StandardBillCalculator()
        self._clock = clock

    def get_config(self) -> GSTConfig:
        """Current configuration, creating the default one on first access."""
        config = self._configs.get_current()
        if config:
            return config

        admin = self._staff.latest_admin()
        if not admin:
            raise NotFoundError("No admin found to create default GST configuration")

        logger.info("Creating default GST configuration (%s%%) for admin %s", DEFAULT_GST_PERCENTAGE, admin.member_id)
        return self._configs.save(
            gst_percentage=float(DEFAULT_GST_PERCENTAGE),
            is_active=True,
            applied_to=GSTScope.ALL,
            updated_by=admin.member_id,
            updated_by_name=admin.display_name,
            now=self._clock(),
        )

    def update_config(
        self,
        *,
        actor_id: str,
        gst_percentage: Any = None,
        is_active: Any = None,
        applied_to: Any = None,
    ) -> GSTConfig:
        pct = None
        if gst_percentage is not None:
            pct = require_number(gst_percentage, "gstPercentage")
            if pct < 0 or pct > 100:
                raise ValidationError("GST percentage must be between 0 and 100")
        if is_active is not None and not isinstance(is_active, bool):
            raise ValidationError("isActive must be a boolean")
        scope = require_choice(applied_to, GSTScope, "appliedTo") if applied_to is not None else None

        admin = self._staff.get_admin(actor_id)
        if not admin:
            raise NotFoundError("Admin not found")

        current = self._configs.get_current()
        return self._configs.save(
            gst_percentage=pct if pct is not None else (current.gst_percentage if current else float(DEFAULT_GST_PERCENTAGE)),
            is_active=is_active if is_active is not None else (current.is_active if current else True),
            applied_to=scope or (current.applied_to if current else GSTScope.ALL),
            updated_by=admin.member_id,
            updated_by_name=admin.display_name,
            now=self._clock(),
        )

    def effective_percentage(self) -> float:
        """Rate to apply right now; 0 when unconfigured, inactive or unreadable."""
        try:
            config = self._configs.get_current()
        except Exception:
            logger.exception("Could not read GST configuration, billing without GST")
            return 0.0
        return config.effective_percentage if config else 0.0

    def billing_view(self) -> dict:
        config = self._configs.get_current()
        if not config:
            return {"gstPercentage": 0, "isActive": False, "appliedTo": None}
        return {
            "gstPercentage": config.effective_percentage,
            "isActive": config.is_active,
            "appliedTo": config.applied_to.value,
        }

    def calculate(self, amount: Any) -> dict:
        value = require_number(amount, "amount", minimum=0)
        pct = self.effective_percentage()
        amounts = self._calculator.compute_from_subtotal(value, 0, pct)
        return {
            "amountBeforeGST": amounts.amount_before_gst,
            "gstPercentage": pct,
            "gstAmount": amounts.gst_amount,
            "finalAmount": amounts.final_amount,
        }
