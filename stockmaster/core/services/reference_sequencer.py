"""
Operation reference sequencing.

References look like WH/IN/0001: a fixed prefix, a per-type code and a
zero-padded sequence that increments from the latest reference of the same
type.
"""

from stockmaster.config import get_logger
from stockmaster.core.entities.operation import OperationType
from stockmaster.core.interfaces.operation_store import IOperationStore

logger = get_logger(__name__)

REFERENCE_PREFIX = "WH"

TYPE_CODES: dict[OperationType, str] = {
    OperationType.RECEIPT: "IN",
    OperationType.DELIVERY: "OUT",
    OperationType.TRANSFER: "INT",
    OperationType.ADJUSTMENT: "ADJ",
}


def format_reference(operation_type: OperationType, sequence: int) -> str:
    """Format e.g. (RECEIPT, 8) as WH/IN/0008."""
    return f"{REFERENCE_PREFIX}/{TYPE_CODES[operation_type]}/{sequence:04d}"


def parse_sequence(reference: str) -> int | None:
    """Trailing sequence number of a reference, or None if malformed."""
    parts = reference.split("/")
    if len(parts) != 3 or not parts[2].isdigit():
        return None
    return int(parts[2])


def next_reference(operation_type: OperationType, last_reference: str | None) -> str:
    """
    Reference following last_reference.

    No previous reference, or one that cannot be parsed, starts at 0001.
    """
    sequence = 1
    if last_reference:
        last = parse_sequence(last_reference)
        if last is None:
            logger.warning(
                "unparseable_reference",
                reference=last_reference,
                type=operation_type.value,
            )
        else:
            sequence = last + 1
    return format_reference(operation_type, sequence)


class ReferenceSequencer:
    """Read-only preview of the next reference for a type.

    Allocation for real happens inside the operation store's insert
    transaction, using next_reference() under a write lock.
    """

    def __init__(self, operation_store: IOperationStore) -> None:
        self._operation_store = operation_store

    async def next_reference(self, operation_type: OperationType) -> str:
        last = await self._operation_store.get_last_reference(operation_type)
        return next_reference(operation_type, last)
