"""
Cash Module (``gp_modules.cash``).

Cash receipts per project, their development / department / other splits
and the derived adjusted receipt.  Receipt writes drive the last two
project lifecycle steps.
"""

from gp_modules.cash.models import CashReceipt
from gp_modules.cash.service import CashService

__all__ = [
    "CashReceipt",
    "CashService",
]
