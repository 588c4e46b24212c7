"""Tests for YAML configuration loading and override chains."""

import pytest

from seeborg.config import ConfigError, load_config, parse_config

BASE_YAML = """
dictionary_path: dict.json
auto_save_period: 120
behavior:
  speaking: true
  learning: true
  reply_rate: 10
  reply_nick: 20
  reply_magic: 30.5
  nick_patterns: ["(?i)seeborg"]
  magic_patterns:
    - original: "pizza"
  blacklisted_patterns: []
  ignored_users: ["^42$"]
telegram:
  token: "abc:123"
  behavior:
    reply_rate: 99
  chat_behaviors:
    - chat_id: -100
      behavior:
        speaking: false
    - chat_id: "7"
      behavior: {}
"""


def _write(tmp_path, text, name="config.yml"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def _base_data(**behavior):
    data = {
        "dictionary_path": "dict.json",
        "behavior": {
            "speaking": True,
            "learning": True,
            "reply_rate": 1,
            "reply_nick": 1,
            "reply_magic": 1,
        },
    }
    data["behavior"].update(behavior)
    return data


def test_load_config_parses_everything(tmp_path):
    config = load_config(_write(tmp_path, BASE_YAML))
    assert config.dictionary_path == "dict.json"
    assert config.auto_save_period == 120
    assert config.behavior.reply_magic == 30.5
    assert [p.original for p in config.behavior.nick_patterns] == ["(?i)seeborg"]
    assert [p.original for p in config.behavior.magic_patterns] == ["pizza"]
    assert config.behavior.ignored_users[0].compiled is not None
    assert config.telegram.token == "abc:123"
    assert config.telegram.behavior.reply_rate == 99.0
    assert config.telegram.behavior.speaking is None
    assert config.discord is None
    assert config.http.enabled is True


def test_override_chain_is_chat_then_platform(tmp_path):
    config = load_config(_write(tmp_path, BASE_YAML))

    chain = config.override_chain("telegram", "-100")
    assert len(chain) == 2
    assert chain[0].speaking is False
    assert chain[1].reply_rate == 99.0

    chain = config.override_chain("telegram", "555")
    assert chain == [config.telegram.behavior]

    assert config.override_chain("discord", "-100") == []
    assert config.override_chain("http") == []


def test_chat_id_match_is_exact_string_equality(tmp_path):
    config = load_config(_write(tmp_path, BASE_YAML))
    assert len(config.override_chain("telegram", -100)) == 2
    assert len(config.override_chain("telegram", "-1000")) == 1
    assert len(config.override_chain("telegram", " -100")) == 1


def test_missing_file_raises_config_error(tmp_path):
    with pytest.raises(ConfigError) as exc:
        load_config(tmp_path / "missing.yml")
    assert "missing.yml" in str(exc.value)


def test_malformed_yaml_raises_config_error(tmp_path):
    with pytest.raises(ConfigError) as exc:
        load_config(_write(tmp_path, "behavior: [unclosed"))
    assert "Malformed YAML" in str(exc.value)


def test_non_utf8_file_raises_config_error(tmp_path):
    path = tmp_path / "config.yml"
    path.write_bytes(b"dictionary_path: d.json\n# caf\xe9\n")
    with pytest.raises(ConfigError) as exc:
        load_config(path)
    assert "config.yml" in str(exc.value)
    assert "UTF-8" in str(exc.value)


def test_bad_pattern_is_reported_at_load(tmp_path):
    text = BASE_YAML.replace('ignored_users: ["^42$"]', 'ignored_users: ["(broken"]')
    with pytest.raises(ConfigError) as exc:
        load_config(_write(tmp_path, text))
    assert "(broken" in str(exc.value)


def test_missing_required_behavior_key():
    data = _base_data()
    del data["behavior"]["speaking"]
    with pytest.raises(ConfigError) as exc:
        parse_config(data)
    assert "speaking" in str(exc.value)


def test_chance_out_of_range():
    with pytest.raises(ConfigError):
        parse_config(_base_data(reply_rate=101))
    with pytest.raises(ConfigError):
        parse_config(_base_data(reply_rate="often"))


def test_switch_must_be_boolean():
    with pytest.raises(ConfigError):
        parse_config(_base_data(speaking="yes please"))


def test_platform_requires_token():
    data = _base_data()
    data["telegram"] = {"behavior": {"reply_rate": 5}}
    with pytest.raises(ConfigError) as exc:
        parse_config(data)
    assert "token" in str(exc.value)


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("SEEBORG_AUTO_SAVE_PERIOD", "5")
    monkeypatch.setenv("SEEBORG_HTTP_PORT", "not-a-number")
    monkeypatch.setenv("SEEBORG_CONFIG_PATH", str(_write(tmp_path, BASE_YAML)))
    config = load_config()
    assert config.auto_save_period == 5
    assert config.http.port == 8010


def test_empty_pattern_lists_default_to_empty():
    config = parse_config(_base_data())
    assert config.behavior.nick_patterns == []
    assert config.behavior.ignored_users == []
