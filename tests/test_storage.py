# tests/test_storage.py
import json
import os
from unittest.mock import patch

import pytest

from seeborg.dictionary import Dictionary
from seeborg.storage import DictionaryError, load_dictionary, save_dictionary


def test_missing_dictionary_is_created_empty(tmp_path):
    path = tmp_path / "dictionary.json"
    d = load_dictionary(path)
    assert d == Dictionary()
    assert json.loads(path.read_text(encoding="utf-8")) == {"sentences": [], "indices": {}}


def test_save_then_load(tmp_path):
    path = tmp_path / "dictionary.json"
    d = Dictionary()
    d.learn("Hello world! I love pizza. I love cake.")
    d.rebuild_indices()
    save_dictionary(path, d)

    loaded = load_dictionary(path)
    assert loaded == d
    assert not loaded.needs_rebuild()
    assert not loaded.learn("i love cake.")


def test_save_accepts_snapshot_dict(tmp_path):
    path = tmp_path / "dictionary.json"
    save_dictionary(path, {"sentences": ["hi."], "indices": {"hi": [0]}})
    assert load_dictionary(path).sentences == ["hi."]


def test_sentences_without_indices_need_rebuild(tmp_path):
    path = tmp_path / "dictionary.json"
    path.write_text(json.dumps({"sentences": ["b sentence.", "a sentence."], "indices": {}}))
    d = load_dictionary(path)
    assert d.needs_rebuild()
    d.rebuild_indices()
    assert d.sentences == ["a sentence.", "b sentence."]
    assert d.indices["sentence"] == [0, 1]


def test_corrupt_json_raises(tmp_path):
    path = tmp_path / "dictionary.json"
    path.write_text("{not json")
    with pytest.raises(DictionaryError) as exc:
        load_dictionary(path)
    assert "not valid JSON" in str(exc.value)


def test_non_utf8_file_raises(tmp_path):
    path = tmp_path / "dictionary.json"
    path.write_bytes(b'{"sentences": ["caf\xe9"], "indices": {}}')
    with pytest.raises(DictionaryError) as exc:
        load_dictionary(path)
    assert "not valid UTF-8" in str(exc.value)


def test_malformed_structure_raises(tmp_path):
    path = tmp_path / "dictionary.json"
    path.write_text(json.dumps({"sentences": [1, 2], "indices": {}}))
    with pytest.raises(DictionaryError) as exc:
        load_dictionary(path)
    assert "malformed" in str(exc.value)


def test_failed_write_raises_and_leaves_no_temp_file(tmp_path):
    path = tmp_path / "dictionary.json"
    save_dictionary(path, Dictionary(["old."], {"old": [0]}))

    with patch("seeborg.storage.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(DictionaryError) as exc:
            save_dictionary(path, Dictionary(["new."], {"new": [0]}))
    assert "disk full" in str(exc.value)
    assert os.listdir(tmp_path) == ["dictionary.json"]
    assert load_dictionary(path).sentences == ["old."]


def test_save_into_missing_directory_raises(tmp_path):
    with pytest.raises(DictionaryError):
        save_dictionary(tmp_path / "nope" / "dictionary.json", Dictionary())
