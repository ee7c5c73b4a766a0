"""
Delivery services package.

- DispatchService: assigning riders and recording handovers
- SettlementService: clearing delivered orders against returned cash
- ShiftService: rider shifts, floats and end-of-shift settlement
"""

from .dispatch_service import DispatchService
from .settlement_service import SettlementService
from .shift_service import ShiftService

__all__ = [
    'DispatchService',
    'SettlementService',
    'ShiftService',
]
