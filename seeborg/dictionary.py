# SeeBorg - dictionary.py
# Copyright (C) 2026 The SeeBorg Contributors

"""Learned sentences and the word index used to pick replies.

The dictionary keeps every learned sentence (lower-cased, unique) and an
inverted index from each word to the positions of the sentences containing
it. Learning appends; `rebuild_indices` sorts the sentences and re-derives the
whole index, which invalidates positions recorded before it.
"""

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

Indices = dict[str, list[int]]

SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
WORD_SPLIT_RE = re.compile(r"[,.!?:\s]+")


def split_sentences(text: str) -> list[str]:
    """Split on whitespace that follows a sentence terminator.

    Terminators not followed by whitespace (URLs, "a.b.c") stay inside the
    sentence.
    """
    return [s for s in SENTENCE_SPLIT_RE.split(text) if s.strip()]


def split_words(text: str) -> list[str]:
    return [w for w in WORD_SPLIT_RE.split(text) if w]


def sort_sentences(sentences: list[str]) -> None:
    sentences.sort(key=str.lower)


def insert_word_into_indices(indices: Indices, word: str, sentence_index: int) -> None:
    entry = indices.setdefault(word, [])
    if sentence_index not in entry:
        entry.append(sentence_index)


class Dictionary:
    def __init__(
        self,
        sentences: list[str] | None = None,
        indices: Indices | None = None,
    ):
        self.sentences: list[str] = list(sentences or [])
        self.indices: Indices = {w: list(ps) for w, ps in (indices or {}).items()}
        self._known = {s.lower() for s in self.sentences}

    def __eq__(self, other):
        if not isinstance(other, Dictionary):
            return NotImplemented
        return self.sentences == other.sentences and self.indices == other.indices

    def __repr__(self):
        return f"Dictionary(sentences={len(self.sentences)}, words={len(self.indices)})"

    # --- Index maintenance ---

    def needs_rebuild(self) -> bool:
        """True when there are sentences but no index at all.

        Partial staleness is not detected.
        """
        return len(self.sentences) > 0 and len(self.indices) == 0

    def rebuild_indices(self) -> None:
        self.indices = {}
        sort_sentences(self.sentences)

        indices: Indices = {}
        for i, sentence in enumerate(self.sentences):
            for word in split_words(sentence.lower()):
                insert_word_into_indices(indices, word, i)
        self.indices = indices
        logger.info(
            "[Dictionary] Rebuilt indices: %d sentences, %d words.",
            len(self.sentences),
            len(self.indices),
        )

    # --- Lookups ---

    def knows_sentence(self, sentence: str) -> bool:
        return sentence.lower() in self._known

    def knows_word(self, word: str) -> bool:
        return word in self.indices

    def known_words(self, line: str) -> list[str]:
        """Distinct words of `line` present in the index, in order of appearance."""
        seen: list[str] = []
        for word in split_words(line.lower()):
            if self.knows_word(word) and word not in seen:
                seen.append(word)
        return seen

    def sentences_with_word(self, word: str) -> list[str]:
        return [self.sentences[i] for i in self.indices.get(word, [])]

    # --- Learning and replying ---

    def learn(self, line: str) -> bool:
        """Learn every new sentence of `line`; return whether anything was new.

        New sentences are appended without re-sorting.
        """
        learned_something = False
        for sentence in split_sentences(line.lower()):
            if self.knows_sentence(sentence):
                continue
            self.sentences.append(sentence)
            self._known.add(sentence)
            sentence_index = len(self.sentences) - 1

            for word in split_words(sentence):
                insert_word_into_indices(self.indices, word, sentence_index)
            learned_something = True
        return learned_something

    def respond_to(self, line: str, rng) -> str | None:
        """Pick a sentence related to `line`, or None when nothing is known.

        One known word of the line is chosen as the pivot, then one sentence
        containing it; both picks are uniform and each consumes one 32-bit
        draw from `rng`.
        """
        known = self.known_words(line)
        if not known:
            return None
        pivot = known[rng.getrandbits(32) % len(known)]
        positions = self.indices[pivot]
        if not positions:
            return None
        return self.sentences[positions[rng.getrandbits(32) % len(positions)]]

    # --- Persistence helpers ---

    def stats(self) -> dict[str, int]:
        return {
            "sentences": len(self.sentences),
            "words": len(self.indices),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "sentences": list(self.sentences),
            "indices": {w: list(ps) for w, ps in self.indices.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Dictionary":
        """Build a dictionary from its persisted form.

        Raises ValueError when the structure is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("dictionary data must be an object")
        sentences = data.get("sentences", [])
        indices = data.get("indices", {})
        if not isinstance(sentences, list) or not all(
            isinstance(s, str) for s in sentences
        ):
            raise ValueError("'sentences' must be a list of strings")
        if not isinstance(indices, dict):
            raise ValueError("'indices' must be an object")
        for word, positions in indices.items():
            if not isinstance(positions, list) or not all(
                isinstance(p, int) and 0 <= p < len(sentences) for p in positions
            ):
                raise ValueError(
                    f"'indices[{word!r}]' must list positions below {len(sentences)}"
                )
        return cls(sentences, indices)
