"""Per-user append-only message ledgers with derived conversation views.

Each user id owns one ledger (a JSON array under ``skilllink_messages_<id>``)
holding every message that user sent or received. Sending writes the same
message into both participants' ledgers; each side only ever reads its own.
The ``read`` flag therefore lives on each copy independently.
"""
from __future__ import annotations

import json
import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional, Protocol

from pydantic import ValidationError

from skilllink.core.models import ConversationPreview, Message, User
from skilllink.db.store import KeyValueStore

LOGGER = logging.getLogger(__name__)

LEDGER_KEY_PREFIX = "skilllink_messages_"

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def ledger_key(user_id: str) -> str:
    return f"{LEDGER_KEY_PREFIX}{user_id}"


def new_message_id(now: Optional[float] = None) -> str:
    """``msg_<milliseconds>_<9 random base36 chars>``."""
    ms = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(9))
    return f"msg_{ms}_{suffix}"


class UserDirectory(Protocol):
    def get_user(self, user_id: str) -> Optional[User]: ...


class ConversationStore:
    def __init__(self, store: KeyValueStore, directory: UserDirectory):
        self._store = store
        self.directory = directory

    # --- ledger I/O -----------------------------------------------------------

    def _read_raw(self, user_id: str) -> list:
        raw = self._store.get(ledger_key(user_id))
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            LOGGER.warning("chat ledger unreadable user=%s; treating as empty", user_id)
            return []
        if not isinstance(data, list):
            LOGGER.warning("chat ledger not a list user=%s; treating as empty", user_id)
            return []
        return data

    def load_ledger(self, user_id: str) -> list[Message]:
        """Every valid message in the user's ledger, in stored order."""
        messages: list[Message] = []
        skipped = 0
        for item in self._read_raw(user_id):
            try:
                messages.append(Message.model_validate(item))
            except ValidationError:
                skipped += 1
        if skipped:
            LOGGER.warning("chat ledger entries skipped user=%s count=%s", user_id, skipped)
        return messages

    # --- operations -----------------------------------------------------------

    def send(
        self,
        current_user_id: str,
        recipient_id: str,
        text: str,
        job_id: Optional[str] = None,
    ) -> Optional[Message]:
        """Append a new message to both ledgers. Blank text is a no-op (None)."""
        content = (text or "").strip()
        if not content or not current_user_id or not recipient_id:
            return None
        if current_user_id == recipient_id:
            LOGGER.debug("chat send to self ignored user=%s", current_user_id)
            return None

        message = Message(
            id=new_message_id(),
            sender_id=current_user_id,
            receiver_id=recipient_id,
            job_id=job_id,
            content=content,
            timestamp=datetime.now(timezone.utc),
            read=False,
        )
        record = message.to_wire()
        updates = {}
        for user_id in (current_user_id, recipient_id):
            ledger = self._read_raw(user_id)
            ledger.append(record)
            updates[ledger_key(user_id)] = json.dumps(ledger)
        self._store.set_many(updates)
        LOGGER.info("chat send id=%s sender=%s receiver=%s job=%s", message.id, current_user_id, recipient_id, job_id)
        return message

    def load_conversation(self, current_user_id: str, other_user_id: str) -> list[Message]:
        """Messages between the two users from current_user_id's ledger, oldest first."""
        pair = {current_user_id, other_user_id}
        thread = [
            m for m in self.load_ledger(current_user_id)
            if {m.sender_id, m.receiver_id} == pair
        ]
        # sorted() is stable: equal timestamps keep ledger order
        return sorted(thread, key=lambda m: m.timestamp)

    def load_previews(self, current_user_id: str) -> list[ConversationPreview]:
        """One preview per conversation partner, most recent conversation first."""
        groups: dict[str, list[Message]] = {}
        for message in self.load_ledger(current_user_id):
            partner = message.other_party(current_user_id)
            if partner is None or partner == current_user_id:
                continue
            groups.setdefault(partner, []).append(message)

        previews: list[ConversationPreview] = []
        for partner_id, messages in groups.items():
            partner = self.directory.get_user(partner_id)
            if partner is None:
                LOGGER.debug("chat preview dropped unknown partner=%s", partner_id)
                continue
            # max() keeps the first of equal keys, so index breaks ties toward the later append
            _, last = max(enumerate(messages), key=lambda pair: (pair[1].timestamp, pair[0]))
            unread = sum(1 for m in messages if m.sender_id == partner_id and not m.read)
            previews.append(ConversationPreview(user=partner, last_message=last, unread_count=unread))

        previews.sort(key=lambda p: p.last_message.timestamp, reverse=True)
        return previews
