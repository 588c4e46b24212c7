# SeeBorg - config.py
# Copyright (C) 2026 The SeeBorg Contributors
#
# Configuration is read from a YAML file. Restart the node after changing it.
#
# Environment:
#   SEEBORG_CONFIG_PATH        (str, default "config.yml") – configuration file
#   SEEBORG_AUTO_SAVE_PERIOD   (int, seconds)  – overrides auto_save_period
#   SEEBORG_HTTP_PORT          (int)           – overrides http.port
#
# Layout:
#   dictionary_path: dictionary.json
#   auto_save_period: 600
#   behavior: {speaking, learning, reply_rate, reply_nick, reply_magic,
#              nick_patterns, magic_patterns, blacklisted_patterns, ignored_users}
#   telegram: {token, behavior: <override>, chat_behaviors: [{chat_id, behavior}]}
#   discord:  same shape as telegram
#   http:     {enabled, host, port}

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from seeborg.behavior import PATTERN_FIELDS, BehaviorOverride, BehaviorPolicy
from seeborg.pattern import Pattern, PatternError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yml"
DEFAULT_AUTO_SAVE_PERIOD = 600
DEFAULT_HTTP_HOST = "127.0.0.1"
DEFAULT_HTTP_PORT = 8010

CHANCE_FIELDS = ("reply_rate", "reply_nick", "reply_magic")
SWITCH_FIELDS = ("speaking", "learning")


class ConfigError(Exception):
    """The configuration file could not be read or is invalid."""


def _int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class ChatBehavior:
    chat_id: str
    behavior: BehaviorOverride


@dataclass
class PlatformConfig:
    token: str
    behavior: BehaviorOverride | None = None
    chat_behaviors: list[ChatBehavior] = field(default_factory=list)

    def chat_override(self, chat_id: str) -> BehaviorOverride | None:
        for cb in self.chat_behaviors:
            if cb.chat_id == chat_id:
                return cb.behavior
        return None


@dataclass
class HttpConfig:
    enabled: bool = True
    host: str = DEFAULT_HTTP_HOST
    port: int = DEFAULT_HTTP_PORT


@dataclass
class Config:
    dictionary_path: str
    behavior: BehaviorPolicy
    auto_save_period: int = DEFAULT_AUTO_SAVE_PERIOD
    telegram: PlatformConfig | None = None
    discord: PlatformConfig | None = None
    http: HttpConfig = field(default_factory=HttpConfig)

    def platform(self, name: str) -> PlatformConfig | None:
        if name == "telegram":
            return self.telegram
        if name == "discord":
            return self.discord
        return None

    def override_chain(self, platform: str, chat_id: str | None = None) -> list[BehaviorOverride]:
        """Override layers for a chat, closest first: chat, then platform."""
        p = self.platform(platform)
        if p is None:
            return []
        chain = []
        if chat_id is not None:
            chat = p.chat_override(str(chat_id))
            if chat is not None:
                chain.append(chat)
        if p.behavior is not None:
            chain.append(p.behavior)
        return chain

    def compile_patterns(self) -> None:
        self.behavior.compile_patterns()
        for p in (self.telegram, self.discord):
            if p is None:
                continue
            if p.behavior is not None:
                p.behavior.compile_patterns()
            for cb in p.chat_behaviors:
                cb.behavior.compile_patterns()


# --- Parsing ---


def _parse_pattern(raw: Any, where: str) -> Pattern:
    if isinstance(raw, str):
        return Pattern(raw)
    if isinstance(raw, dict) and isinstance(raw.get("original"), str):
        return Pattern(raw["original"])
    raise ConfigError(f"{where}: a pattern must be a string or {{original: <regex>}}, got {raw!r}")


def _parse_patterns(raw: Any, where: str) -> list[Pattern]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError(f"{where}: expected a list of patterns, got {raw!r}")
    return [_parse_pattern(item, f"{where}[{i}]") for i, item in enumerate(raw)]


def _parse_chance(raw: Any, where: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{where}: expected a number between 0 and 100, got {raw!r}")
    value = float(raw)
    if not 0.0 <= value <= 100.0:
        raise ConfigError(f"{where}: {value} is outside 0-100")
    return value


def _parse_switch(raw: Any, where: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigError(f"{where}: expected true or false, got {raw!r}")
    return raw


def _require_mapping(raw: Any, where: str) -> dict:
    if not isinstance(raw, dict):
        raise ConfigError(f"{where}: expected a mapping, got {raw!r}")
    return raw


def _parse_behavior_fields(raw: dict, where: str, required: bool) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in SWITCH_FIELDS + CHANCE_FIELDS + PATTERN_FIELDS:
        if name not in raw or raw[name] is None:
            if required and name not in PATTERN_FIELDS:
                raise ConfigError(f"{where}: missing required key '{name}'")
            continue
        key = f"{where}.{name}"
        if name in SWITCH_FIELDS:
            values[name] = _parse_switch(raw[name], key)
        elif name in CHANCE_FIELDS:
            values[name] = _parse_chance(raw[name], key)
        else:
            values[name] = _parse_patterns(raw[name], key)
    return values


def parse_behavior(raw: Any, where: str = "behavior") -> BehaviorPolicy:
    raw = _require_mapping(raw, where)
    return BehaviorPolicy(**_parse_behavior_fields(raw, where, required=True))


def parse_override(raw: Any, where: str) -> BehaviorOverride:
    raw = _require_mapping(raw, where)
    return BehaviorOverride(**_parse_behavior_fields(raw, where, required=False))


def parse_platform(raw: Any, where: str) -> PlatformConfig:
    raw = _require_mapping(raw, where)
    token = raw.get("token")
    if not isinstance(token, str) or not token:
        raise ConfigError(f"{where}: missing required key 'token'")

    behavior = None
    if raw.get("behavior") is not None:
        behavior = parse_override(raw["behavior"], f"{where}.behavior")

    chat_behaviors = []
    raw_chats = raw.get("chat_behaviors") or []
    if not isinstance(raw_chats, list):
        raise ConfigError(f"{where}.chat_behaviors: expected a list")
    for i, item in enumerate(raw_chats):
        item_where = f"{where}.chat_behaviors[{i}]"
        item = _require_mapping(item, item_where)
        if item.get("chat_id") is None:
            raise ConfigError(f"{item_where}: missing required key 'chat_id'")
        chat_behaviors.append(
            ChatBehavior(
                chat_id=str(item["chat_id"]),
                behavior=parse_override(item.get("behavior") or {}, f"{item_where}.behavior"),
            )
        )
    return PlatformConfig(token=token, behavior=behavior, chat_behaviors=chat_behaviors)


def parse_http(raw: Any) -> HttpConfig:
    if raw is None:
        return HttpConfig()
    raw = _require_mapping(raw, "http")
    port = raw.get("port", DEFAULT_HTTP_PORT)
    if isinstance(port, bool) or not isinstance(port, int):
        raise ConfigError(f"http.port: expected an integer, got {port!r}")
    return HttpConfig(
        enabled=bool(raw.get("enabled", True)),
        host=str(raw.get("host", DEFAULT_HTTP_HOST)),
        port=port,
    )


def parse_config(data: Any) -> Config:
    data = _require_mapping(data, "config")
    dictionary_path = data.get("dictionary_path")
    if not isinstance(dictionary_path, str) or not dictionary_path:
        raise ConfigError("config: missing required key 'dictionary_path'")
    if "behavior" not in data:
        raise ConfigError("config: missing required key 'behavior'")

    auto_save_period = data.get("auto_save_period", DEFAULT_AUTO_SAVE_PERIOD)
    if isinstance(auto_save_period, bool) or not isinstance(auto_save_period, int):
        raise ConfigError(f"auto_save_period: expected seconds as an integer, got {auto_save_period!r}")

    config = Config(
        dictionary_path=dictionary_path,
        behavior=parse_behavior(data["behavior"]),
        auto_save_period=auto_save_period,
        telegram=parse_platform(data["telegram"], "telegram") if data.get("telegram") else None,
        discord=parse_platform(data["discord"], "discord") if data.get("discord") else None,
        http=parse_http(data.get("http")),
    )
    config.auto_save_period = _int("SEEBORG_AUTO_SAVE_PERIOD", config.auto_save_period)
    config.http.port = _int("SEEBORG_HTTP_PORT", config.http.port)

    try:
        config.compile_patterns()
    except PatternError as e:
        raise ConfigError(str(e)) from e
    return config


def load_config(path: str | Path | None = None) -> Config:
    """Read and validate the YAML configuration file.

    Every failure is reported as ConfigError naming the file.
    """
    path = Path(path or os.environ.get("SEEBORG_CONFIG_PATH", DEFAULT_CONFIG_PATH))
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"Configuration file {path} is not valid UTF-8: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed YAML in {path}: {e}") from e

    try:
        config = parse_config(data)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e
    logger.info("[Config] %s loaded.", path)
    return config
