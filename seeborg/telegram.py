# SeeBorg - telegram.py
# Copyright (C) 2026 The SeeBorg Contributors

"""Telegram transport: long-polls the Bot API and relays lines to the Borg."""

import logging
import threading

import requests

from seeborg.borg import Borg
from seeborg.config import Config

logger = logging.getLogger(__name__)

API_BASE = "https://api.telegram.org"
POLL_TIMEOUT = 30
MAX_BACKOFF = 60.0


class TelegramError(Exception):
    """The Bot API answered with ok=false."""


class TelegramPoller:
    def __init__(self, borg: Borg, config: Config, session: requests.Session | None = None):
        if config.telegram is None:
            raise ValueError("Telegram is not configured")
        self.borg = borg
        self.config = config
        self.session = session or requests.Session()
        self.base_url = f"{API_BASE}/bot{config.telegram.token}"
        self.offset = None
        self._stop = threading.Event()
        self._thread = None

    def _call(self, method: str, timeout: float, **payload):
        resp = self.session.post(f"{self.base_url}/{method}", json=payload, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
        if not data.get("ok"):
            raise TelegramError(f"{method} failed: {data.get('description', 'unknown error')}")
        return data.get("result")

    def get_updates(self) -> list[dict]:
        payload = {"timeout": POLL_TIMEOUT, "allowed_updates": ["message"]}
        if self.offset is not None:
            payload["offset"] = self.offset
        return self._call("getUpdates", timeout=POLL_TIMEOUT + 10, **payload) or []

    def send_reply(self, chat_id, message_id, text: str) -> None:
        self._call(
            "sendMessage",
            timeout=10,
            chat_id=chat_id,
            text=text,
            reply_to_message_id=message_id,
        )

    def handle_update(self, update: dict) -> str | None:
        """Process one update; return the reply that was sent, if any."""
        self.offset = update["update_id"] + 1
        message = update.get("message") or {}
        text = message.get("text")
        sender = message.get("from") or {}
        chat = message.get("chat") or {}
        if not text or "id" not in sender or "id" not in chat:
            return None

        chain = self.config.override_chain("telegram", str(chat["id"]))
        response = self.borg.process_line(str(sender["id"]), text, chain)
        if response is None:
            return None
        self.send_reply(chat["id"], message.get("message_id"), response)
        return response

    def poll_once(self) -> int:
        updates = self.get_updates()
        for update in updates:
            try:
                self.handle_update(update)
            except (requests.exceptions.RequestException, TelegramError) as e:
                logger.warning("[Telegram] Could not reply to update %s: %s", update.get("update_id"), e)
        return len(updates)

    def run(self) -> None:
        logger.info("[Telegram] Starting long-poll loop.")
        backoff = 1.0
        while not self._stop.is_set():
            try:
                self.poll_once()
                backoff = 1.0
            except (requests.exceptions.RequestException, TelegramError, ValueError) as e:
                logger.error("[Telegram] Polling failed: %s. Retrying in %.0fs.", e, backoff)
                self._stop.wait(backoff)
                backoff = min(backoff * 2, MAX_BACKOFF)
            except Exception:
                logger.exception("[Telegram] Unexpected error while polling. Retrying in %.0fs.", backoff)
                self._stop.wait(backoff)
                backoff = min(backoff * 2, MAX_BACKOFF)
        logger.info("[Telegram] Poll loop stopped.")

    def start(self) -> threading.Thread:
        self._thread = threading.Thread(target=self.run, name="telegram-poller", daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self._stop.set()
