"""
Process-wide settings for the handover workflow.

Loaded once from ``settings.CASH_HANDOVER`` when the app is ready and
passed explicitly into ledger and query functions.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class SequenceMode(str, Enum):
    # strict: every stage needs its confirmed predecessor
    STRICT = 'strict'
    # permissive: employee_to_manager may start a first-ever cycle without a shift collection
    PERMISSIVE = 'permissive'


@dataclass(frozen=True)
class HandoverConfig:
    dispute_tolerance: Decimal = Decimal('0.00')
    bank_deposit_tolerance: Decimal = Decimal('100.00')
    sequence_mode: SequenceMode = SequenceMode.STRICT
    unconfirmed_lookback_days: int = 7
    currency_symbol: str = '₹'

    def __post_init__(self):
        if self.dispute_tolerance < 0 or self.bank_deposit_tolerance < 0:
            raise ValueError("Tolerances must be non-negative")
        if self.unconfirmed_lookback_days < 0:
            raise ValueError("UNCONFIRMED_LOOKBACK_DAYS must be non-negative")

    @property
    def is_strict(self):
        return self.sequence_mode == SequenceMode.STRICT

    def format_amount(self, amount) -> str:
        return f"{self.currency_symbol}{Decimal(amount):.2f}"


def load_handover_config(raw: dict | None) -> HandoverConfig:
    """Build a HandoverConfig from the ``CASH_HANDOVER`` settings dict."""
    raw = raw or {}
    defaults = HandoverConfig()
    return HandoverConfig(
        dispute_tolerance=Decimal(str(raw.get('DISPUTE_TOLERANCE', defaults.dispute_tolerance))),
        bank_deposit_tolerance=Decimal(str(raw.get('BANK_DEPOSIT_TOLERANCE', defaults.bank_deposit_tolerance))),
        sequence_mode=SequenceMode(raw.get('SEQUENCE_MODE', defaults.sequence_mode.value)),
        unconfirmed_lookback_days=int(raw.get('UNCONFIRMED_LOOKBACK_DAYS', defaults.unconfirmed_lookback_days)),
        currency_symbol=raw.get('CURRENCY_SYMBOL', defaults.currency_symbol),
    )
