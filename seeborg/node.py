# SeeBorg - node.py
# Copyright (C) 2026 The SeeBorg Contributors

import logging
import sys
import threading
import time

from flask import Flask, jsonify, request
from flask_cors import CORS

from seeborg.borg import Borg
from seeborg.config import Config, ConfigError, load_config
from seeborg.seeborg_logger import setup_logger
from seeborg.storage import DictionaryError, load_dictionary, save_dictionary
from seeborg.telegram import TelegramPoller

logger = logging.getLogger("node")

app = Flask(__name__)
CORS(app, resources={r"/*": {"origins": "*"}})
node_instance = None

HTTP_USER = "http"


def print_banner():
    c = "\033[96m"
    r = "\033[0m"
    print(c)
    print(r"""
  ____            ____
 / ___|  ___  ___| __ )  ___  _ __ __ _
 \___ \ / _ \/ _ \  _ \ / _ \| '__/ _` |
  ___) |  __/  __/ |_) | (_) | | | (_| |
 |____/ \___|\___|____/ \___/|_|  \__, |
                                  |___/
""")
    print(r)


class SeeBorgNode:
    def __init__(self, config: Config):
        self.config = config

        dictionary = load_dictionary(config.dictionary_path)
        if dictionary.needs_rebuild():
            logger.info("[Node] Indices need to be built. Building indices.")
            dictionary.rebuild_indices()

        self.borg = Borg(dictionary, config.behavior)

        self.telegram = None
        if config.telegram is not None:
            self.telegram = TelegramPoller(self.borg, config)
        if config.discord is not None:
            logger.warning(
                "[Node] A discord section is configured but there is no Discord adapter. Ignoring it."
            )

        self._stop = threading.Event()
        self._save_lock = threading.Lock()
        self._started_ts = time.time()
        self._last_save_ts = 0.0
        self._last_save_ok = None
        self._save_failures = 0

    def save(self) -> bool:
        """Persist the dictionary; failures are logged, never raised."""
        with self._save_lock:
            data = self.borg.snapshot()
            try:
                save_dictionary(self.config.dictionary_path, data)
            except DictionaryError as e:
                self._save_failures += 1
                self._last_save_ok = False
                logger.error("[Node] Dictionary save failed: %s", e)
                return False
            self._last_save_ts = time.time()
            self._last_save_ok = True
            logger.info(
                "[Node] Saved %d sentences to %s.",
                len(data["sentences"]),
                self.config.dictionary_path,
            )
            return True

    def _auto_save_loop(self):
        period = self.config.auto_save_period
        logger.info("[Node] Starting auto-save every %ds.", period)
        while not self._stop.wait(period):
            self.save()

    def start_background_tasks(self):
        if self.telegram is not None:
            self.telegram.start()
        if self.config.auto_save_period > 0:
            threading.Thread(
                target=self._auto_save_loop,
                name="auto-save",
                daemon=True,
            ).start()

    def shutdown(self):
        logger.info("[Node] Shutting down.")
        self._stop.set()
        if self.telegram is not None:
            self.telegram.stop()
        self.save()

    def get_state(self) -> dict:
        now = time.time()

        def age(ts: float) -> float | None:
            return None if not ts else max(0.0, now - ts)

        return {
            "dictionary_path": self.config.dictionary_path,
            "auto_save_period_sec": self.config.auto_save_period,
            "uptime_sec": age(self._started_ts),
            "last_save_age_sec": age(self._last_save_ts),
            "last_save_ok": self._last_save_ok,
            "save_failures": self._save_failures,
            "telegram": self.telegram is not None,
            "http": self.config.http.enabled,
        }


@app.route("/respond", methods=["GET"])
def handle_respond():
    if node_instance is None:
        return jsonify({"error": "Node is not initialized"}), 503
    line = request.args.get("line", "")
    if not line.strip():
        return jsonify({"error": "Missing line"}), 400
    user_id = request.args.get("user", HTTP_USER)
    # HTTP callers get the base behavior; there is no per-chat section for them.
    response = node_instance.borg.process_line(user_id, line)
    return jsonify({"response": response})


@app.route("/stats", methods=["GET"])
def handle_stats():
    if node_instance is None:
        return jsonify({"error": "Node is not initialized"}), 503
    stats = node_instance.borg.stats()
    stats["last_save_ok"] = node_instance.get_state()["last_save_ok"]
    return jsonify(stats)


@app.route("/save", methods=["POST"])
def handle_save():
    if node_instance is None:
        return jsonify({"error": "Node is not initialized"}), 503
    if node_instance.save():
        return jsonify({"saved": True})
    return jsonify({"saved": False}), 500


@app.route("/debug/state", methods=["GET"])
def handle_debug_state():
    """Debug-only endpoint exposing save scheduling and adapters."""
    if node_instance is None:
        return jsonify({"error": "Node is not initialized"}), 503
    return jsonify(node_instance.get_state())


def main():
    global node_instance

    setup_logger()
    print_banner()
    logger.info("Please wait while things are set up.")

    try:
        config = load_config()
    except ConfigError as e:
        logger.error("[Node] Configuration error: %s", e)
        sys.exit(1)

    try:
        node_instance = SeeBorgNode(config)
    except DictionaryError as e:
        logger.error("[Node] Dictionary error: %s", e)
        sys.exit(1)

    node_instance.start_background_tasks()
    try:
        if config.http.enabled:
            app.run(host=config.http.host, port=config.http.port, debug=False)
        else:
            while True:
                time.sleep(1.0)
    except KeyboardInterrupt:
        pass
    finally:
        node_instance.shutdown()


if __name__ == "__main__":
    main()
