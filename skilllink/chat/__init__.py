from .directory import StaticDirectory
from .store import ConversationStore, UserDirectory, ledger_key

__all__ = [
    "ConversationStore",
    "StaticDirectory",
    "UserDirectory",
    "ledger_key",
]
