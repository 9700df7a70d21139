from __future__ import annotations

from enum import Enum


class DeltaKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"


class TransactionState(str, Enum):
    # write ids may still be allocated
    OPEN = "open"
    # terminal: every delta written under the transaction is visible
    COMMITTED = "committed"
    # terminal: every delta written under the transaction stays invisible
    ABORTED = "aborted"

    @staticmethod
    def terminal_states():
        return {
            TransactionState.COMMITTED,
            TransactionState.ABORTED,
        }

    def is_terminal(self) -> bool:
        return self in TransactionState.terminal_states()
