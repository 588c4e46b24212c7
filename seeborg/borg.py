# SeeBorg - borg.py
# Copyright (C) 2026 The SeeBorg Contributors

"""Platform-agnostic decision engine.

The Borg owns the dictionary, the base behavior policy and the random source.
Transports hand it one line at a time together with the override chain of the
chat the line came from; `process_line` runs the whole learn/reply decision
under a single lock.
"""

import logging
import random
import threading

from seeborg.behavior import BehaviorOverride, BehaviorPolicy, BehaviorResolver
from seeborg.dictionary import Dictionary
from seeborg.pattern import Pattern, PatternError, matches_any

logger = logging.getLogger(__name__)


def chance(probability: float, rng) -> bool:
    """Draw one 32-bit value and test it against `probability` (0-100).

    Succeeds when the draw modulo 100 is strictly greater than the
    probability, so 100 never succeeds and 0 succeeds 99 times in 100.
    """
    p = rng.getrandbits(32) % 100
    return float(p) > probability or p == 100


class Borg:
    def __init__(
        self,
        dictionary: Dictionary,
        behavior: BehaviorPolicy,
        rng: random.Random | None = None,
    ):
        self.dictionary = dictionary
        self.behavior = behavior
        self.rng = rng if rng is not None else random.Random()
        self.lock = threading.Lock()

    def _matches(
        self, tag: str, text: str, patterns: list[Pattern], kind: str
    ) -> Pattern | None:
        """matches_any, with a broken pattern list treated as matching nothing."""
        try:
            return matches_any(text, patterns)
        except PatternError as e:
            logger.error("[%s] Ignoring unusable %s list: %s", tag, kind, e)
            return None

    def respond_to(self, line: str) -> str | None:
        return self.dictionary.respond_to(line, self.rng)

    def learn(self, line: str) -> bool:
        return self.dictionary.learn(line)

    def should_learn(
        self,
        user_id: str,
        line: str,
        overrides: list[BehaviorOverride] | None = None,
    ) -> bool:
        b = BehaviorResolver(self.behavior, overrides)
        logger.debug("[should_learn] Using %r for resolving behavior values.", b)

        if not b.is_learning():
            logger.debug("[should_learn] Learning is off")
            return False

        try:
            matched = matches_any(user_id, b.ignored_users())
            if matched is not None:
                logger.debug(
                    "[should_learn] User %r matches ignore pattern %r. Refusing to learn",
                    user_id,
                    matched.original,
                )
                return False

            matched = matches_any(line, b.blacklisted_patterns())
            if matched is not None:
                logger.debug(
                    "[should_learn] Input %r matches blacklisted pattern %r. Refusing to learn",
                    line,
                    matched.original,
                )
                return False
        except PatternError as e:
            logger.error("[should_learn] Refusing to learn, pattern error: %s", e)
            return False

        logger.debug("[should_learn] Should learn %r", line)
        return True

    def should_reply_to(
        self,
        user_id: str,
        line: str,
        overrides: list[BehaviorOverride] | None = None,
    ) -> bool:
        b = BehaviorResolver(self.behavior, overrides)
        logger.debug("[should_reply_to] Using %r for resolving behavior values.", b)

        matched = self._matches("should_reply_to", user_id, b.ignored_users(), "ignored_users")
        if matched is not None:
            logger.debug(
                "[should_reply_to] User is ignored, user ID %r matched pattern %r",
                user_id,
                matched.original,
            )
            return True

        if not b.is_speaking():
            logger.debug("[should_reply_to] Speaking is off")
            return False

        matched = self._matches("should_reply_to", line, b.nick_patterns(), "nick_patterns")
        if matched is not None:
            reply_nick = b.reply_nick()
            logger.debug(
                "[should_reply_to] Input %r matched nick pattern %r, chance %s",
                line,
                matched.original,
                reply_nick,
            )
            if chance(reply_nick, self.rng):
                logger.debug("[should_reply_to] Reply nick decided to reply")
                return True
            logger.debug("[should_reply_to] Reply nick decided not to reply")

        matched = self._matches("should_reply_to", line, b.magic_patterns(), "magic_patterns")
        if matched is not None:
            reply_magic = b.reply_magic()
            logger.debug(
                "[should_reply_to] Input %r matched magic pattern %r, chance %s",
                line,
                matched.original,
                reply_magic,
            )
            if chance(reply_magic, self.rng):
                logger.debug("[should_reply_to] Reply magic decided to reply")
                return True
            logger.debug("[should_reply_to] Reply magic decided not to reply")

        reply_rate = b.reply_rate()
        decided = chance(reply_rate, self.rng)
        logger.debug(
            "[should_reply_to] Reply rate %s, decided %s",
            reply_rate,
            "to reply" if decided else "not to reply",
        )
        return decided

    def process_line(
        self,
        user_id: str,
        line: str,
        overrides: list[BehaviorOverride] | None = None,
    ) -> str | None:
        """Maybe reply to one incoming line, then learn from it.

        The reply is picked before the line is learned, so it never comes
        from a sentence this line just taught. The returned string is a copy; callers send it after the
        lock is released.
        """
        if not line or not line.strip():
            return None
        with self.lock:
            learning = self.should_learn(user_id, line, overrides)
            response = None
            if self.should_reply_to(user_id, line, overrides):
                response = self.respond_to(line)
            if learning and self.learn(line):
                logger.debug("[Borg] Learned new sentence(s) from %r", user_id)
        if response is not None:
            logger.info("[Borg] Reply to %s: %s", user_id, response)
        return response

    def snapshot(self) -> dict:
        """Copy of the persisted dictionary form, taken under the lock."""
        with self.lock:
            return self.dictionary.to_dict()

    def stats(self) -> dict[str, int]:
        with self.lock:
            return self.dictionary.stats()
