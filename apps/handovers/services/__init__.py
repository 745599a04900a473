"""Services for the cash handover workflow."""

from .exceptions import (
    HandoverServiceError,
    UnauthorizedError,
    NotFoundError,
    HandoverNotFoundError,
    InvalidStateError,
    SequenceViolationError,
    AmountMismatchError,
    ValidationError,
    MissingAmountError,
)
from .ledger import (
    create_handover,
    create_shift_collection,
    confirm_handover,
    resolve_dispute,
    record_bank_deposit,
)
from .queries import (
    get_handover,
    pending_for_user,
    station_handovers,
    cash_flow_summary,
    unconfirmed_handovers,
    bank_deposits,
    handover_chain,
)

__all__ = [
    # Exceptions
    'HandoverServiceError',
    'UnauthorizedError',
    'NotFoundError',
    'HandoverNotFoundError',
    'InvalidStateError',
    'SequenceViolationError',
    'AmountMismatchError',
    'ValidationError',
    'MissingAmountError',
    # Ledger
    'create_handover',
    'create_shift_collection',
    'confirm_handover',
    'resolve_dispute',
    'record_bank_deposit',
    # Queries
    'get_handover',
    'pending_for_user',
    'station_handovers',
    'cash_flow_summary',
    'unconfirmed_handovers',
    'bank_deposits',
    'handover_chain',
]
