r"""
Linescript parameter and schema specifications.

Overview
- Specs
  • Parameter: one named argument of a command (e.g. 'path' of OUTPUT), possibly
    the default target of an unqualified token and possibly required.
  • Schema: the declarative signature of one command keyword: its ordered
    parameters, the factory that builds the command object, and its
    multiplicity policy in a script's command table.

- Decorator
  • @schema(keyword, *parameters, ...): build a Schema whose factory is the
    decorated command class and attach it as __schema__.

- Introspection & representation
  • SchemaType metaclass provides stable __repr__/__rich_repr__ and exposes
    fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- Parameter
  • name: identifier matching r"[A-Za-z_][A-Za-z0-9_]*".
  • default: bool, receives the unqualified token of a line.
  • required: bool, binding fails when left unbound.
  • descr: Unset | str (short help), non-empty when provided.
- Schema
  • keyword: upper-case identifier matching r"[A-Z][A-Z0-9_]*".
  • parameters: Parameter instances, unique names, at most one default.
  • factory: callable receiving the bound {name: value} mapping.
  • singleton: bool, at most one instance per script.
  • redeclare: "overwrite" (later lines win) or "error"; singletons only.
  • kind: "preamble" (script metadata) or "action" (build step).

Quick example:
    >>> from linescript.schemas import Parameter, schema
    >>> @schema("OUTPUT", Parameter("path", default=True, required=True), singleton=True)
    ... class OutputCommand(Command): ...
"""
import functools
import operator
import re

from rich.text import Text

from .utils import *


class SchemaType(type):
    """
    Metaclass exposing introspectable fields and stable representations.

    Conventions
    - __typename__ is derived from the class name (camel-case split with
      hyphens) and used in construction errors.
    - __displayable__ (if set) narrows the fields shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_descr(cls, metadata, /):
    # descr: Unset → None; strings are trimmed and must stay non-empty.
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_parameters(cls, metadata, /):
    """
    Internal: validate the parameter list of a schema.

    - every item must be a Parameter.
    - names must be unique within the schema.
    - at most one parameter may be the default target.
    """
    names = set()
    defaults = []
    for parameter in metadata["parameters"]:
        if not isinstance(parameter, Parameter):
            raise TypeError(f"{cls.__typename__} parameters must be parameter specs")
        elif parameter.name in names:
            raise ValueError(f"{cls.__typename__} parameter names cannot contain duplicates ({parameter.name!r})")
        names.add(parameter.name)
        if parameter.default:
            defaults.append(parameter.name)

    if len(defaults) > 1:
        raise ValueError(f"{cls.__typename__} cannot have more than one default parameter ({', '.join(defaults)})")

    metadata["parameters"] = tuple(metadata["parameters"])


class Parameter(metaclass=SchemaType):
    """
    One named argument of a command.

    A token "name:value" binds this parameter when 'name' matches. A default
    parameter additionally receives the single unqualified token of a line.
    """

    __introspectable__ = (
        "name",
        "default",
        "required",
        "descr",
    )

    def __new__(cls, name, /, *, default=False, required=False, descr=Unset):
        metadata = {
            "name": name,
            "default": bool(default),
            "required": bool(required),
            "descr": descr,
        }
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", name):
            raise ValueError(f"{cls.__typename__} 'name' must be an identifier (got {name!r})")
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self


class Schema(metaclass=SchemaType):
    """
    Declarative signature of one command keyword.

    The binder is a single algorithm parameterized by a Schema: it learns the
    valid parameter names, which one takes the unqualified token, and which are
    required. The command table learns from it whether later occurrences of
    the keyword replace, append, or fail.
    """

    __introspectable__ = (
        "keyword",
        "parameters",
        "factory",
        "singleton",
        "redeclare",
        "kind",
        "descr",
    )

    __displayable__ = (
        "keyword",
        "parameters",
        "singleton",
        "kind",
    )

    def __new__(
            cls,
            keyword,
            /,
            *parameters,
            factory,
            singleton=False,
            redeclare="overwrite",
            kind="preamble",
            descr=Unset,
    ):
        metadata = {
            "keyword": keyword,
            "parameters": parameters,
            "factory": factory,
            "singleton": bool(singleton),
            "redeclare": redeclare,
            "kind": kind,
            "descr": descr,
        }
        if not isinstance(keyword, str):
            raise TypeError(f"{cls.__typename__} 'keyword' must be a string")
        elif not re.fullmatch(r"[A-Z][A-Z0-9_]*", keyword):
            raise ValueError(f"{cls.__typename__} 'keyword' must be an upper-case identifier (got {keyword!r})")
        if not callable(factory):
            raise TypeError(f"{cls.__typename__} 'factory' must be callable")
        if redeclare not in ("overwrite", "error"):
            raise ValueError(f"{cls.__typename__} 'redeclare' must be one of 'overwrite' or 'error'")
        if redeclare == "error" and not singleton:
            raise TypeError(f"only singleton {pluralize(cls.__typename__)} can forbid redeclaration")
        if kind not in ("preamble", "action"):
            raise ValueError(f"{cls.__typename__} 'kind' must be one of 'preamble' or 'action'")
        _sanitize_parameters(cls, metadata)
        _sanitize_descr(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._index = {parameter.name: parameter for parameter in self._parameters}
        return self

    @property
    def names(self):
        """Declared parameter names, in declaration order."""
        return tuple(self._index)

    @property
    def default(self):
        """The parameter receiving an unqualified token, or None."""
        return next((parameter for parameter in self._parameters if parameter.default), None)

    @property
    def required(self):
        """Parameters that must be bound for a line to be valid."""
        return tuple(parameter for parameter in self._parameters if parameter.required)

    def parameter(self, name, /):
        """Return the parameter called name; KeyError when undeclared."""
        return self._index[name]

    def __contains__(self, name):
        return name in self._index


def schema(*args, **kwargs):
    """
    Decorator attaching a Schema to a command class.

    Usage
        @schema("OUTPUT", Parameter("path", default=True, required=True), singleton=True)
        class OutputCommand(Command): ...

    Behavior
    - The decorated class becomes the schema factory (it is called with the
      bound arguments mapping).
    - A class can carry only one schema; decorating twice is rejected.

    Returns
    - the decorated class, with __schema__ set.
    """
    @rename("schema")
    def wrapper(factory, /):
        if not isinstance(factory, type):
            raise TypeError("@schema() must be applied to a class")
        if "__schema__" in vars(factory):
            raise TypeError("@schema() must be applied only once")
        factory.__schema__ = Schema(*args, factory=factory, **kwargs)
        return factory

    return wrapper


__all__ = (
    # Classes (specifications)
    "Parameter",
    "Schema",

    # Decorators
    "schema",
)

del SchemaType
