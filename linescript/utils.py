"""
Linescript utilities (small helpers shared by the parsing layers).

Overview
- UnsetType / Unset
  • Sentinel for "not provided" where None is a meaningful value (e.g. an
    optional parameter description or a missing environment mapping).
- coalesce(value, default=None)
  • Materialize Unset into a default while preserving None/""/0.
- rename(callable, name) / @rename("name")
  • Give generated helpers stable __name__/__qualname__ for readable tracebacks.
- mirror("attr")
  • Read-only property exposing a private backing field as a fresh copy.
- pluralize(word, count)
  • Pick the singular or plural form of a word for fault messages.
- ordinal(number)
  • Position labels ("first", "second", "11th") used in fault messages.

Names not listed in __all__ are internal.
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sealed singleton type for "value not provided".

    - bool(Unset) is False, but Unset is not None.
    - repr(Unset) is "Unset".
    - UnsetType() always returns the same instance.
    """

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Return object unless it is Unset, in which case return default.

    Falsey values other than Unset are preserved:
    - coalesce("", "x")    -> ""
    - coalesce(Unset, "x") -> "x"
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable.

    - rename(callable, name) renames in place and returns the callable.
    - rename(name) returns a decorator doing the same.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    # Fresh containers all the way down; strings and scalars pass through.
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_immortalize, object.values())))
    elif isinstance(object, Set):
        return set(map(_immortalize, object))
    return object


def mirror(name, /):
    """
    Build a read-only property reading self._<name>.

    Containers are copied on every access, so callers may mutate what they get
    without touching the owner's state (a script's command table, a schema's
    parameter list, ...).
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


@functools.cache
def pluralize(word, count=2, /):
    """
    Return word as-is for a count of one, otherwise its English plural.

    Only the regular rules needed by fault messages are covered
    ("argument" -> "arguments", "entry" -> "entries", "prefix" -> "prefixes").
    """
    if not isinstance(word, str):
        raise TypeError("pluralize() argument must be a string")
    if count == 1 or not word:
        return word
    lower = word.lower()
    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


@functools.cache
def ordinal(number, /):
    """
    Return a human-friendly ordinal label for a 1-based position.

    1..10 render as words ("first".."tenth"); larger numbers use numeric
    suffixes, including the 11th/12th/13th exceptions.
    """
    try:
        return {
            1: "first",
            2: "second",
            3: "third",
            4: "fourth",
            5: "fifth",
            6: "sixth",
            7: "seventh",
            8: "eighth",
            9: "ninth",
            10: "tenth",
        }[number]
    except KeyError:
        pass

    if 10 < number % 100 < 20:
        return f"{number}th"

    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


Unset = UnsetType()


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "pluralize",
    "ordinal",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
