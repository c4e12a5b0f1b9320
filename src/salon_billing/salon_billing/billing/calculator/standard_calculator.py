from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..model import BillAmounts
from .base import BillCalculator


def round2(value: float) -> float:
    """Half-up to 2 decimal places."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class StandardBillCalculator(BillCalculator):
    """Standard rule: discount before tax, GST on the remainder, no floor at zero.

    Only gstAmount and finalAmount are rounded; finalAmount uses the unrounded GST.
    """

    def compute_from_subtotal(self, subtotal: float, discount: float, gst_percentage: float) -> BillAmounts:
        amount_before_gst = subtotal - discount
        gst_amount = amount_before_gst * gst_percentage / 100
        return BillAmounts(
            subtotal=subtotal,
            discount=discount,
            amount_before_gst=amount_before_gst,
            gst_percentage=gst_percentage,
            gst_amount=round2(gst_amount),
            final_amount=round2(amount_before_gst + gst_amount),
        )
