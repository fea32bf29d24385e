"""Composition root: build storage, backend, session and chat once, tear down once."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from sqlalchemy.engine import Engine

from skilllink import backends
from skilllink.auth.credentials import CredentialStore
from skilllink.auth.manager import SessionManager
from skilllink.backends import Backend, dataset
from skilllink.backends.http import ApiClient
from skilllink.chat.directory import StaticDirectory
from skilllink.chat.store import ConversationStore
from skilllink.config import Settings, load_settings
from skilllink.db.session import init_storage, make_engine, session_factory
from skilllink.db.store import KeyValueStore

LOGGER = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: Engine
    storage: KeyValueStore
    credentials: CredentialStore
    client: ApiClient
    backend: Backend
    session: SessionManager
    directory: StaticDirectory
    conversations: ConversationStore

    def start(self):
        """Restore any stored session and make the session user resolvable in chat."""
        state = self.session.initialize()
        self.remember_current_user()
        return state

    def remember_current_user(self) -> None:
        if self.session.current_user is not None:
            self.directory.add(self.session.current_user)

    def close(self) -> None:
        self.session.close()
        close_http = getattr(self.client.http, "close", None)
        if callable(close_http):
            close_http()
        self.engine.dispose()


def create_context(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[Engine] = None,
    http: Any = None,
    on_invalidated: Optional[Callable[[str], None]] = None,
) -> AppContext:
    settings = settings or load_settings()
    engine = engine or make_engine(settings.storage_url)
    init_storage(engine)

    storage = KeyValueStore(session_factory(engine))
    credentials = CredentialStore(storage)
    client = ApiClient(settings.api_url, http=http, timeout=settings.http_timeout)
    backend = backends.create(settings.backend_name, settings=settings, credentials=credentials, client=client)
    session = SessionManager(backend, credentials, on_invalidated=on_invalidated)
    client.attach_session(session)

    directory = StaticDirectory(dataset.all_users())
    conversations = ConversationStore(storage, directory)
    LOGGER.info("context ready backend=%s api=%s", backend.name, settings.api_url)
    return AppContext(
        settings=settings,
        engine=engine,
        storage=storage,
        credentials=credentials,
        client=client,
        backend=backend,
        session=session,
        directory=directory,
        conversations=conversations,
    )
