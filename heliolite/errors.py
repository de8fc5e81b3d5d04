"""Exceptions raised while verifying consensus and execution data."""

from __future__ import annotations

from typing import Any


def _display(value: Any) -> str:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "0x" + bytes(value).hex()
    return str(value)


class ConsensusError(Exception):
    """Base class for failures while verifying consensus data."""

    default_message = "consensus error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class InsufficientParticipation(ConsensusError):
    default_message = "insufficient participation"


class InvalidTimestamp(ConsensusError):
    default_message = "invalid timestamp"


class InvalidPeriod(ConsensusError):
    default_message = "invalid sync committee period"


class NotRelevant(ConsensusError):
    default_message = "update not relevant"


class InvalidFinalityProof(ConsensusError):
    default_message = "invalid finality proof"


class InvalidNextSyncCommitteeProof(ConsensusError):
    default_message = "invalid next sync committee proof"


class InvalidCurrentSyncCommitteeProof(ConsensusError):
    default_message = "invalid current sync committee proof"


class InvalidSignature(ConsensusError):
    default_message = "invalid sync committee signature"


class InvalidHeaderHash(ConsensusError):
    """A header hashed to something other than the trusted root."""

    def __init__(self, found: str, expected: str) -> None:
        self.found = found
        self.expected = expected
        super().__init__(f"invalid header hash found: {found}, expected: {expected}")


class PayloadNotFound(ConsensusError):
    """No verified header exists for the requested slot."""

    def __init__(self, slot: int) -> None:
        self.slot = slot
        super().__init__(f"payload not found for slot: {slot}")


class CheckpointTooOld(ConsensusError):
    default_message = "checkpoint is too old"


class IncorrectConsensusRpcNetwork(ConsensusError):
    default_message = "consensus rpc is for the incorrect network"


class ExecutionError(Exception):
    """Base class for failures while verifying execution data."""

    default_message = "execution error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message if message is not None else self.default_message)


class InvalidAccountProof(ExecutionError):
    def __init__(self, address: Any) -> None:
        self.address = address
        super().__init__(f"invalid account proof for address: {_display(address)}")


class InvalidStorageProof(ExecutionError):
    def __init__(self, address: Any, slot: Any) -> None:
        self.address = address
        self.slot = slot
        super().__init__(
            f"invalid storage proof for address: {_display(address)}, slot: {_display(slot)}"
        )


class CodeHashMismatch(ExecutionError):
    def __init__(self, address: Any, found: str, expected: str) -> None:
        self.address = address
        self.found = found
        self.expected = expected
        super().__init__(
            f"code hash mismatch for address: {_display(address)}, "
            f"found: {found}, expected: {expected}"
        )


class ReceiptRootMismatch(ExecutionError):
    def __init__(self, tx: str) -> None:
        self.tx = tx
        super().__init__(f"receipt root mismatch for tx: {tx}")


class MissingTransaction(ExecutionError):
    def __init__(self, tx: str) -> None:
        self.tx = tx
        super().__init__(f"missing transaction for tx: {tx}")


class NoReceiptForTransaction(ExecutionError):
    def __init__(self, tx: str) -> None:
        self.tx = tx
        super().__init__(f"could not prove receipt for tx: {tx}")


class MissingLog(ExecutionError):
    def __init__(self, tx: str, index: int) -> None:
        self.tx = tx
        self.index = index
        super().__init__(f"missing log for transaction: {tx}, index: {index}")


class TooManyLogsToProve(ExecutionError):
    def __init__(self, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(f"too many logs to prove: {count}, current limit is: {limit}")


class IncorrectExecutionRpcNetwork(ExecutionError):
    default_message = "execution rpc is for the incorect network"


class RpcError(Exception):
    """A remote call failed."""

    def __init__(self, method: str, error: Any) -> None:
        self.method = method
        self.error = error
        super().__init__(f"{method} rpc error: {error}")


class EvmError(Exception):
    """A call executed against verified state did not succeed."""

    @staticmethod
    def decode_revert_reason(data: bytes) -> str | None:
        """Decode an ABI-encoded revert string, or return None if it is not one."""
        body = bytes(data)
        if len(body) < 4:
            return None
        body = body[4:]
        if len(body) < 32:
            return None
        offset = int.from_bytes(body[:32], "big")
        if offset + 32 > len(body):
            return None
        length = int.from_bytes(body[offset : offset + 32], "big")
        start = offset + 32
        end = start + length
        if end > len(body):
            return None
        try:
            return body[start:end].decode("utf-8")
        except UnicodeDecodeError:
            return None