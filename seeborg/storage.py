# SeeBorg - storage.py
# Copyright (C) 2026 The SeeBorg Contributors

"""JSON persistence for the dictionary."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from seeborg.dictionary import Dictionary

logger = logging.getLogger(__name__)

DEFAULT_DICTIONARY_PATH = "dictionary.json"


class DictionaryError(Exception):
    """The dictionary file could not be read, parsed or written."""


def load_dictionary(path: str | Path = DEFAULT_DICTIONARY_PATH) -> Dictionary:
    """Load the dictionary at `path`, creating an empty one if there is none."""
    path = Path(path)
    if not path.is_file():
        logger.info("[Storage] No dictionary at %s. Creating an empty one.", path)
        d = Dictionary()
        save_dictionary(path, d)
        return d

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DictionaryError(f"Could not read dictionary file {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise DictionaryError(f"Dictionary file {path} is not valid UTF-8: {e}") from e
    except json.JSONDecodeError as e:
        raise DictionaryError(f"Dictionary file {path} is not valid JSON: {e}") from e

    try:
        d = Dictionary.from_dict(data)
    except ValueError as e:
        raise DictionaryError(f"Dictionary file {path} is malformed: {e}") from e
    logger.info("[Storage] %s loaded: %d sentences.", path, len(d.sentences))
    return d


def save_dictionary(path: str | Path, dictionary: Dictionary | dict[str, Any]) -> None:
    """Write the dictionary to `path` atomically.

    Accepts either a Dictionary or its persisted form (see Borg.snapshot).
    """
    path = Path(path)
    data = dictionary.to_dict() if isinstance(dictionary, Dictionary) else dictionary
    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_name = tmp.name
            json.dump(data, tmp, ensure_ascii=False)
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        if tmp_name and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise DictionaryError(f"Could not write dictionary file {path}: {e}") from e
    logger.debug("[Storage] Saved dictionary to %s.", path)
