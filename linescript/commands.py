"""
Linescript command layer: the typed objects a script line turns into.

What this module provides
- Command: immutable value object built by the binder from a bound
  {parameter: value} mapping. Its class carries the Schema (see
  linescript.schemas.schema) that describes the keyword it stands for.
- The built-in commands of the script language:
  • preambles (script metadata, one per script): OUTPUT, WORKDIR, KUBECONFIG,
    AS, FROM.
  • actions (build steps, kept in source order): COPY, CAPTURE, RUN.

Core ideas
- A command never changes after construction; the command table owns it.
- str(command) is a line that parses back into an equal command.
- Typed accessors (OutputCommand.path, FromCommand.hosts, ...) read the bound
  mapping; absent optional parameters read as None.

Quick start
    from linescript import parse

    script = parse("OUTPUT path:out/bundle.tar.gz\\nRUN 'uname -a'")
    script.preambles["OUTPUT"][0].path   # 'out/bundle.tar.gz'
    script.actions[0].argv               # ['uname', '-a']
"""
import re
import shlex
from types import MappingProxyType

from .schemas import Parameter, schema
from .utils import Unset


class Command:
    """
    Base class of every command object.

    Lifecycle
    - Constructed once per successfully bound line, either by the binder
      (through Schema.factory) or directly with keyword arguments.
    - Owned by the Script it was inserted into.

    Contract
    - type(self).__schema__ must be a Schema; undecorated subclasses cannot
      be instantiated.
    - arguments may only name parameters declared by the schema; missing
      required parameters are the binder's concern, not this constructor's.
    """

    __schema__ = Unset

    def __init__(self, arguments=(), /, **kwargs):
        schema = type(self).__schema__
        if schema is Unset:
            raise TypeError(f"{type(self).__name__} has no schema; decorate it with @schema(...)")
        arguments = dict(arguments, **kwargs)
        if unknown := sorted(arguments.keys() - set(schema.names)):
            raise TypeError(f"{schema.keyword} has no parameter named {', '.join(map(repr, unknown))}")
        for name, value in arguments.items():
            if not isinstance(value, str):
                raise TypeError(f"{schema.keyword} argument {name!r} must be a string")
        # Keep declaration order so str() is stable.
        ordered = {name: arguments[name] for name in schema.names if name in arguments}
        object.__setattr__(self, "_arguments", MappingProxyType(ordered))

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} objects are immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} objects are immutable")

    @property
    def keyword(self):
        return type(self).__schema__.keyword

    @property
    def arguments(self):
        """Read-only view of the bound {parameter: value} mapping."""
        return self._arguments

    def argument(self, name, default=None, /):
        """Return the value bound to name, or default when it was not given."""
        if name not in type(self).__schema__:
            raise KeyError(name)
        return self._arguments.get(name, default)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return dict(self._arguments) == dict(other._arguments)

    def __hash__(self):
        return hash((type(self), frozenset(self._arguments.items())))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % item for item in self._arguments.items()))

    def __rich_repr__(self):
        yield from self._arguments.items()

    def __str__(self):
        # shlex.quote single-quotes any value holding '$', which keeps it verbatim on re-parse.
        return shlex.join([self.keyword, *("%s:%s" % item for item in self._arguments.items())])


@schema(
    "OUTPUT",
    Parameter("path", default=True, required=True, descr="archive produced by the script"),
    singleton=True,
    descr="where the collected bundle is written",
)
class OutputCommand(Command):
    @property
    def path(self):
        return self._arguments["path"]


@schema(
    "WORKDIR",
    Parameter("path", default=True, required=True, descr="scratch directory"),
    singleton=True,
    descr="directory used while collecting files",
)
class WorkdirCommand(Command):
    @property
    def path(self):
        return self._arguments["path"]


@schema(
    "KUBECONFIG",
    Parameter("path", default=True, required=True, descr="kubeconfig file"),
    singleton=True,
    descr="cluster credentials used by cluster-facing actions",
)
class KubeconfigCommand(Command):
    @property
    def path(self):
        return self._arguments["path"]


@schema(
    "AS",
    Parameter("userid", default=True, required=True),
    Parameter("groupid"),
    singleton=True,
    descr="identity used to run actions",
)
class AsCommand(Command):
    @property
    def userid(self):
        return self._arguments["userid"]

    @property
    def groupid(self):
        return self._arguments.get("groupid")


@schema(
    "FROM",
    Parameter("hosts", default=True, required=True, descr="space or comma separated host list"),
    Parameter("port"),
    singleton=True,
    descr="machines the actions run against",
)
class FromCommand(Command):
    @property
    def hosts(self):
        return tuple(host for host in re.split(r"[\s,]+", self._arguments["hosts"]) if host)

    @property
    def port(self):
        return self._arguments.get("port")


@schema(
    "COPY",
    Parameter("paths", default=True, required=True, descr="space separated paths"),
    kind="action",
    descr="copy files into the bundle",
)
class CopyCommand(Command):
    @property
    def paths(self):
        return tuple(self._arguments["paths"].split())


@schema(
    "CAPTURE",
    Parameter("cmd", default=True, required=True),
    kind="action",
    descr="run a command and store its output in the bundle",
)
class CaptureCommand(Command):
    @property
    def cmd(self):
        return self._arguments["cmd"]


@schema(
    "RUN",
    Parameter("cmd", default=True, required=True),
    kind="action",
    descr="run a command without storing its output",
)
class RunCommand(Command):
    @property
    def cmd(self):
        return self._arguments["cmd"]

    @property
    def argv(self):
        return shlex.split(self._arguments["cmd"])


__all__ = (
    "Command",
    "OutputCommand",
    "WorkdirCommand",
    "KubeconfigCommand",
    "AsCommand",
    "FromCommand",
    "CopyCommand",
    "CaptureCommand",
    "RunCommand",
)
