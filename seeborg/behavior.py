# SeeBorg - behavior.py
# Copyright (C) 2026 The SeeBorg Contributors
#
# Behavior values that gate learning and replying.
#
#   BehaviorPolicy    the base layer, every field set
#   BehaviorOverride  a partial layer, None means "ask the layer below"
#   BehaviorResolver  base policy + override chain (closest first)

from dataclasses import dataclass, field, fields

from seeborg.pattern import Pattern, compile_all

PATTERN_FIELDS = (
    "nick_patterns",
    "magic_patterns",
    "blacklisted_patterns",
    "ignored_users",
)


@dataclass
class BehaviorPolicy:
    speaking: bool = True
    learning: bool = True
    # Chances are in [0, 100].
    reply_rate: float = 1.0
    reply_nick: float = 1.0
    reply_magic: float = 1.0
    nick_patterns: list[Pattern] = field(default_factory=list)
    magic_patterns: list[Pattern] = field(default_factory=list)
    blacklisted_patterns: list[Pattern] = field(default_factory=list)
    ignored_users: list[Pattern] = field(default_factory=list)

    def compile_patterns(self) -> None:
        for name in PATTERN_FIELDS:
            compile_all(getattr(self, name))


@dataclass
class BehaviorOverride:
    speaking: bool | None = None
    learning: bool | None = None
    reply_rate: float | None = None
    reply_nick: float | None = None
    reply_magic: float | None = None
    nick_patterns: list[Pattern] | None = None
    magic_patterns: list[Pattern] | None = None
    blacklisted_patterns: list[Pattern] | None = None
    ignored_users: list[Pattern] | None = None

    def compile_patterns(self) -> None:
        for name in PATTERN_FIELDS:
            patterns = getattr(self, name)
            if patterns is not None:
                compile_all(patterns)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


class BehaviorResolver:
    """Read-only view resolving each behavior value through the override chain.

    The chain is walked closest-first; the first layer that sets a field wins,
    and the base policy answers when no layer does.
    """

    def __init__(
        self,
        base: BehaviorPolicy,
        overrides: list[BehaviorOverride] | None = None,
    ):
        self.base = base
        self.overrides = [o for o in (overrides or []) if o is not None]

    def _resolve(self, name: str):
        for layer in self.overrides:
            value = getattr(layer, name)
            if value is not None:
                return value
        return getattr(self.base, name)

    def is_speaking(self) -> bool:
        return self._resolve("speaking")

    def is_learning(self) -> bool:
        return self._resolve("learning")

    def reply_rate(self) -> float:
        return self._resolve("reply_rate")

    def reply_nick(self) -> float:
        return self._resolve("reply_nick")

    def reply_magic(self) -> float:
        return self._resolve("reply_magic")

    def nick_patterns(self) -> list[Pattern]:
        return self._resolve("nick_patterns")

    def magic_patterns(self) -> list[Pattern]:
        return self._resolve("magic_patterns")

    def blacklisted_patterns(self) -> list[Pattern]:
        return self._resolve("blacklisted_patterns")

    def ignored_users(self) -> list[Pattern]:
        return self._resolve("ignored_users")

    def effective(self) -> BehaviorPolicy:
        """Flatten the chain into a single policy."""
        return BehaviorPolicy(
            **{f.name: self._resolve(f.name) for f in fields(BehaviorPolicy)}
        )

    def __repr__(self) -> str:
        return f"BehaviorResolver(layers={len(self.overrides)}, effective={self.effective()!r})"
