"""Quirk rule data model and first-match-wins matching engine."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum, auto

from ..errors import DetectionError
from ..log import log
from ..protocol import BacklightType, SystemIdentity


class MatchKind(Enum):
    """How a field pattern is compared against the DMI string."""

    SUBSTRING = auto()  # Pattern occurs anywhere in the field (covers prefixes)
    EXACT = auto()  # Whole field equals the pattern


@dataclass(frozen=True)
class FieldMatch:
    """One predicate of a quirk rule."""

    field: str
    pattern: str
    kind: MatchKind = MatchKind.SUBSTRING

    def __post_init__(self):
        if self.field not in SystemIdentity.field_names():
            raise ValueError(f"Unknown identity field: {self.field}")

    def matches(self, identity: SystemIdentity) -> bool:
        value = identity.get(self.field)
        if value is None:
            return False
        if self.kind is MatchKind.EXACT:
            return value == self.pattern
        return self.pattern in value


def dmi_match(field: str, pattern: str) -> FieldMatch:
    return FieldMatch(field, pattern, MatchKind.SUBSTRING)


def dmi_exact_match(field: str, pattern: str) -> FieldMatch:
    return FieldMatch(field, pattern, MatchKind.EXACT)


@dataclass(frozen=True)
class FixedAction:
    """Force a backlight type whenever the identity matches."""

    backlight_type: BacklightType

    def commit(self) -> BacklightType:
        return self.backlight_type


@dataclass(frozen=True)
class GatedAction:
    """
    Force a backlight type only if a secondary hardware check passes.

    Used where DMI strings are too generic to identify the machine on
    their own. A check that raises counts as failed, except for
    detection errors which propagate.
    """

    check: Callable[[], bool]
    backlight_type: BacklightType

    def commit(self) -> BacklightType:
        try:
            passed = bool(self.check())
        except DetectionError:
            raise
        except Exception as e:
            log("debug", "quirk_check_failed", check=_callable_name(self.check), error=str(e))
            passed = False
        return self.backlight_type if passed else BacklightType.UNDEFINED


Action = FixedAction | GatedAction


@dataclass(frozen=True)
class QuirkRule:
    """
    A conjunction of DMI predicates and the action taken when all hold.

    A rule without predicates never matches.
    """

    matches: tuple[FieldMatch, ...]
    action: Action
    ident: str = ""
    url: str | None = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "matches", tuple(self.matches))
        if not self.action.backlight_type.is_defined:
            raise ValueError("Quirk action must force a defined backlight type")

    def applies_to(self, identity: SystemIdentity) -> bool:
        return bool(self.matches) and all(m.matches(identity) for m in self.matches)

    @property
    def backlight_type(self) -> BacklightType:
        return self.action.backlight_type

    @property
    def is_gated(self) -> bool:
        return isinstance(self.action, GatedAction)


class QuirkDatabase:
    """
    Ordered quirk rules with first-match-wins semantics.

    Example:
        db = QuirkDatabase([
            QuirkRule((dmi_match("sys_vendor", "Acer"),), FixedAction(BacklightType.NATIVE)),
        ])
        db.resolve(SystemIdentity(sys_vendor="Acer"))  # BacklightType.NATIVE
    """

    def __init__(self, rules: Iterable[QuirkRule] = ()):
        self._rules: tuple[QuirkRule, ...] = tuple(rules)

    @property
    def rules(self) -> Sequence[QuirkRule]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def prepend(self, rules: Iterable[QuirkRule]) -> QuirkDatabase:
        """Return a new database with `rules` evaluated before the current ones."""
        return QuirkDatabase((*rules, *self._rules))

    def match(self, identity: SystemIdentity) -> QuirkRule | None:
        """Return the first rule that matches and commits, or None."""
        for rule in self._rules:
            if not rule.applies_to(identity):
                continue
            if rule.action.commit() is not BacklightType.UNDEFINED:
                return rule
        return None

    def resolve(self, identity: SystemIdentity) -> BacklightType:
        """Return the forced backlight type for this identity, or UNDEFINED."""
        rule = self.match(identity)
        if rule is None:
            return BacklightType.UNDEFINED
        log("info", "quirk_matched", ident=rule.ident, type=rule.backlight_type.value)
        return rule.backlight_type


def _callable_name(fn: Callable) -> str:
    return getattr(fn, "__qualname__", None) or repr(fn)
