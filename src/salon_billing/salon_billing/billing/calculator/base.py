from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ..model import BillAmounts, ServiceLineItem


class BillCalculator(ABC):
    """Calculator interface (Strategy Pattern for bill totals)."""

    @abstractmethod
    def compute_from_subtotal(self, subtotal: float, discount: float, gst_percentage: float) -> BillAmounts:
        raise NotImplementedError

    def compute(self, services: Sequence[ServiceLineItem], discount: float, gst_percentage: float) -> BillAmounts:
        return self.compute_from_subtotal(sum(s.price for s in services), discount, gst_percentage)
