"""Order status base classes with flag-based metadata.

This module provides a declarative way to define workflow statuses with
combinable flags describing where the garments physically are.

Usage:
    class MyStatus(WorkflowStatusEnum):
        RECEIVED = Status("Received", Flags.IN_STORE)
        WASHING = Status("Washing", Flags.IN_STORE | Flags.PROCESSING, phrase="Your order is being washed")
        DELIVERED = Status("Delivered", Flags.TERMINAL)
"""

from dataclasses import dataclass
from enum import IntFlag, StrEnum, auto
from typing import Any


class Flags(IntFlag):
    """Workflow status metadata flags.

    Flags:
        IN_STORE   - Garments are on the premises (a rack may be assigned)
        PROCESSING - Garments are going through a cleaning/finishing stage
        IN_TRANSIT - Garments are travelling between customer and store
        TERMINAL   - End of the workflow, no further processing expected
    """

    NONE = 0
    IN_STORE = auto()
    PROCESSING = auto()
    IN_TRANSIT = auto()
    TERMINAL = auto()


@dataclass(frozen=True)
class FlagRule:
    """Rule for validating flag combinations.

    Attributes:
        when: All these bits must be present to trigger the rule
        required: These bits must also be present (when rule triggers)
        forbidden: These bits must be absent (when rule triggers)
    """

    when: Flags
    required: Flags = Flags.NONE
    forbidden: Flags = Flags.NONE

    def __post_init__(self) -> None:
        if self.when == Flags.NONE:
            raise ValueError("when may not be empty")
        if self.required & self.forbidden:
            raise ValueError("required and forbidden overlap")


FLAG_RULES: set[FlagRule] = {
    # Processing happens on the premises
    FlagRule(
        when=Flags.PROCESSING,
        required=Flags.IN_STORE,
    ),
    # Garments cannot be on a rack and on the road at the same time
    FlagRule(
        when=Flags.IN_TRANSIT,
        forbidden=Flags.IN_STORE | Flags.TERMINAL,
    ),
    FlagRule(
        when=Flags.TERMINAL,
        forbidden=Flags.IN_STORE | Flags.PROCESSING,
    ),
}


def validate_flags(value: Flags) -> None:
    """Validate flag combination against rules."""
    for rule in FLAG_RULES:
        # Rule triggers only if all `when` bits are present
        if (value & rule.when) != rule.when:
            continue

        missing = rule.required & ~value
        present_forbidden = value & rule.forbidden

        if missing or present_forbidden:
            parts: list[str] = []
            if missing:
                missing_name = missing.name or str(missing)
                parts.append(f"{missing_name.replace('|', ' and ')} must be present")
            if present_forbidden:
                forbidden_name = present_forbidden.name or str(present_forbidden)
                parts.append(f"{forbidden_name.replace('|', ' and ')} cannot be present")

            when_name = rule.when.name or str(rule.when)
            when_txt = when_name.replace("|", " and ")
            raise ValueError(f"When {when_txt}: " + " and ".join(parts))


@dataclass(frozen=True, slots=True)
class Status:
    """Status definition with value, flags, and the phrase shown to customers."""

    value: str
    flags: Flags = Flags.NONE
    phrase: str = ""

    def __post_init__(self) -> None:
        validate_flags(self.flags)

    @property
    def is_in_store(self) -> bool:
        return bool(self.flags & Flags.IN_STORE)

    @property
    def is_terminal(self) -> bool:
        return bool(self.flags & Flags.TERMINAL)


# Registry to store Status metadata for each enum class
_status_registries: dict[type, dict[str, Status]] = {}


class WorkflowStatusEnum(StrEnum):
    """Base class for workflow status enums with metadata support.

    Subclasses define members using Status objects:
        WASHING = Status("Washing", Flags.IN_STORE | Flags.PROCESSING, phrase="...")

    The enum value is the string (for DB), metadata accessible via .meta
    """

    def __new__(cls, status: Status | str) -> "WorkflowStatusEnum":
        if isinstance(status, Status):
            value = status.value
            if cls not in _status_registries:
                _status_registries[cls] = {}
            _status_registries[cls][value] = status
        else:
            value = status

        obj = str.__new__(cls, value)
        obj._value_ = value
        return obj

    @property
    def meta(self) -> Status:
        """Get metadata for this status."""
        registry = _status_registries.get(type(self), {})
        return registry.get(self._value_, Status(self._value_))

    @classmethod
    def in_store_states(cls) -> "frozenset[Any]":
        """States where garments are physically on the premises."""
        return frozenset(s for s in cls if s.meta.is_in_store)

    @classmethod
    def terminal_states(cls) -> "frozenset[Any]":
        """Final states - delivered, returned, refunded, cancelled."""
        return frozenset(s for s in cls if s.meta.is_terminal)
