from enum import Enum
from typing import Iterable, FrozenSet, List

from atmfjstc.lib.java_codegen.errors import ConstructionError


class Modifier(Enum):
    """
    Declaration modifiers. They are always rendered in the order in which they are listed here, regardless of the order
    in which they were added to a declaration.
    """
    PUBLIC = 'public'
    PROTECTED = 'protected'
    PRIVATE = 'private'
    ABSTRACT = 'abstract'
    DEFAULT = 'default'
    STATIC = 'static'
    FINAL = 'final'
    TRANSIENT = 'transient'
    VOLATILE = 'volatile'
    SYNCHRONIZED = 'synchronized'
    NATIVE = 'native'
    STRICTFP = 'strictfp'

    @property
    def keyword(self) -> str:
        return self.value


_MODIFIER_ORDER = {modifier: index for index, modifier in enumerate(Modifier)}


def sorted_modifiers(modifiers: Iterable[Modifier]) -> List[Modifier]:
    return sorted(modifiers, key=lambda modifier: _MODIFIER_ORDER[modifier])


def modifier_set(modifiers: Iterable[Modifier]) -> FrozenSet[Modifier]:
    """Converts an iterable of modifiers to a frozenset, checking that each item really is a `Modifier`"""
    result = frozenset(modifiers)

    for modifier in result:
        if not isinstance(modifier, Modifier):
            raise TypeError(f"Not a modifier: {modifier!r}")

    return result


def require_exactly_one_of(modifiers: FrozenSet[Modifier], *mutually_exclusive: Modifier):
    count = sum(1 for modifier in mutually_exclusive if modifier in modifiers)
    if count != 1:
        raise ConstructionError(
            "Modifiers {} must contain one of {}".format(
                [m.keyword for m in sorted_modifiers(modifiers)],
                [m.keyword for m in mutually_exclusive],
            )
        )
