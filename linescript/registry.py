"""
Command registry: keyword → Schema, fixed at construction.

A Registry is an explicit, immutable object that parsers receive by reference.
Nothing registers itself globally; `standard` is simply a Registry built once
from the built-in commands, and tests or hosts build their own.
"""
import difflib
from types import MappingProxyType

from .commands import (
    AsCommand,
    CaptureCommand,
    CopyCommand,
    FromCommand,
    KubeconfigCommand,
    OutputCommand,
    RunCommand,
    WorkdirCommand,
)
from .faults import FaultCode, UnknownCommandError, getdoc
from .schemas import Schema
from .utils import Unset


class Registry:
    """
    Immutable mapping of command keywords to their schemas.

    Parameters
    - *commands: command classes decorated with @schema(...) or bare Schema
      objects.
    - strict: when True, a "prefix:value" token whose prefix belongs to another
      command's parameters is rejected instead of being bound as an unqualified
      value (see foreign()).

    Raises
    - TypeError: an item is neither a Schema nor a class carrying one.
    - ValueError: two items declare the same keyword.
    """

    def __init__(self, *commands, strict=False):
        schemas = {}
        for command in commands:
            schema = command if isinstance(command, Schema) else getattr(command, "__schema__", Unset)
            if not isinstance(schema, Schema):
                raise TypeError("registry items must be schemas or command classes decorated with @schema()")
            if schema.keyword in schemas:
                raise ValueError(f"registry keyword {schema.keyword!r} is already in use")
            schemas[schema.keyword] = schema
        self._schemas = MappingProxyType(schemas)
        self._strict = bool(strict)
        self._foreign = MappingProxyType({
            keyword: frozenset(
                name
                for other in schemas.values() if other is not schema
                for name in other.names
            ) - set(schema.names) if strict else frozenset()
            for keyword, schema in schemas.items()
        })

    @property
    def strict(self):
        return self._strict

    @property
    def schemas(self):
        return self._schemas

    def lookup(self, keyword, /):
        """
        Return the schema for keyword.

        Raises
        - UnknownCommandError: keyword is not registered; close matches are
          offered in the hint and in the 'suggestions' option.
        """
        try:
            return self._schemas[keyword]
        except KeyError:
            pass

        suggestions = difflib.get_close_matches(keyword, self._schemas.keys(), 5)
        if not suggestions and keyword.upper() in self._schemas:
            suggestions = [keyword.upper()]
        try:
            hint = "did you mean %r? known commands are %s" % (suggestions[0], ", ".join(self._schemas))
        except IndexError:
            hint = "known commands are %s" % ", ".join(self._schemas)
        raise UnknownCommandError(
            "unknown command %r" % keyword,
            title="unknown command",
            code=FaultCode.UNKNOWN_COMMAND,
            keyword=keyword,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_COMMAND),
        )

    def foreign(self, schema, /):
        """
        Parameter names declared by other commands but not by schema.

        Always empty for non-strict registries.
        """
        return self._foreign.get(schema.keyword, frozenset())

    def __getitem__(self, keyword):
        return self._schemas[keyword]

    def __contains__(self, keyword):
        return keyword in self._schemas

    def __iter__(self):
        return iter(self._schemas)

    def __len__(self):
        return len(self._schemas)

    def __repr__(self):
        return "registry(%s%s)" % (", ".join(self._schemas), ", strict=True" if self._strict else "")


standard = Registry(
    OutputCommand,
    WorkdirCommand,
    KubeconfigCommand,
    AsCommand,
    FromCommand,
    CopyCommand,
    CaptureCommand,
    RunCommand,
)
"""The built-in command set of the script language."""


__all__ = (
    "Registry",
    "standard",
)
