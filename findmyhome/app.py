# findmyhome/app.py
"""
Composition root: FindMyHome client

Purpose
-------
Wire settings, the API client and the session context into the screen-level
flows, with a defined lifecycle:
  - ``App.create()``  at start-up (loads settings, opens the durable session),
  - ``App.logout()``  tears the session down,
  - ``App.close()``   releases the HTTP session.

Usage
-----
    app = App.create()
    route = app.auth.resume()
    if route is Route.CHAT:
        app.chat.load()
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from findmyhome.core.api.client import ApiClient
from findmyhome.core.auth.flow import AuthFlow
from findmyhome.core.debug_log import configure_logging
from findmyhome.core.preferences.intake import IntakeFlow
from findmyhome.core.routes import Route
from findmyhome.core.session.store import Session
from findmyhome.core.sync.chats import ChatManager
from findmyhome.core.sync.synchronizer import ConversationSynchronizer
from findmyhome.inputs.settings import SettingsLoader
from findmyhome.schemas.models import ClientSettings


@dataclass
class App:
    settings: ClientSettings
    api: ApiClient
    session: Session
    auth: AuthFlow
    intake: IntakeFlow
    chat: ConversationSynchronizer
    chats: ChatManager

    @classmethod
    def create(
        cls,
        settings: ClientSettings | None = None,
        *,
        settings_path: str | Path | None = None,
        api: ApiClient | None = None,
        session: Session | None = None,
    ) -> App:
        configure_logging()
        cfg = settings or SettingsLoader().load(settings_path)
        client = api or ApiClient(cfg)
        sess = session or Session.open(cfg.state_dir)
        sync = ConversationSynchronizer(client, sess)
        return cls(
            settings=cfg,
            api=client,
            session=sess,
            auth=AuthFlow(client, sess),
            intake=IntakeFlow(client, sess),
            chat=sync,
            chats=ChatManager(client, sess, sync),
        )

    def logout(self) -> Route:
        route = self.auth.logout()
        self.chat.reset()
        self.chats.chats = []
        self.chats.preferences = None
        self.intake = IntakeFlow(self.api, self.session)
        return route

    def close(self) -> None:
        self.api.close()
