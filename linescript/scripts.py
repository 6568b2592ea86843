"""
Linescript script layer: the command table and the line-by-line parser.

What this module provides
- Script: per-parse command table.
  • preambles: keyword → list of commands; singleton keywords hold at most one
    entry (later lines overwrite, or fail when the schema says so).
  • actions: build-step commands in source order.
  • frozen once parsing completes.
- Parser: drives tokenize → expand → bind → insert for every line, attaches
  line numbers to faults, and surfaces them (raise, defer, or print).
- parse(source, ...): one-shot convenience around Parser.

Source format
- One command per line: KEYWORD followed by arguments.
- Blank lines and lines starting with '#' are ignored.

Fault handling modes (mirrors the rendering flags on faults)
- default: the first error is raised with its 'line' option set.
- deferred: every faulty line is recorded, the remaining lines are still
  parsed, and a ScriptExit grouping all errors is raised at the end.
- shell: faults are printed to stderr with rich and the process exits with
  status 1 (after the last line when also deferred).
"""
import copy
import functools
import logging
import os
from collections.abc import Iterable

from .binder import bind
from .commands import Command
from .faults import *
from .registry import Registry, standard
from .tokens import expand, split
from .utils import *

logger = logging.getLogger(__name__)


class Script:
    """
    Command table produced by one parse.

    A Script is exclusively owned by the parse that fills it; concurrent parses
    each get their own. After freeze() it is read-only.
    """

    name = mirror("name")
    preambles = mirror("preambles")
    actions = mirror("actions")

    def __init__(self, name="<script>"):
        self._name = name
        self._preambles = {}
        self._actions = []
        self._frozen = False

    @property
    def frozen(self):
        return self._frozen

    def insert(self, command, /):
        """
        Store command under its keyword.

        - multi-valued keywords append.
        - singleton keywords replace the previous entry, or raise
          DuplicatedCommandError when their schema has redeclare="error".

        Returns the inserted command.
        """
        if not isinstance(command, Command):
            raise TypeError("insert() argument must be a command")
        if self._frozen:
            raise RuntimeError("script %r is frozen" % self._name)

        schema = type(command).__schema__
        entries = self._preambles.setdefault(schema.keyword, []) if schema.kind == "preamble" else self._actions

        if schema.singleton and any(entry.keyword == schema.keyword for entry in entries):
            if schema.redeclare == "error":
                raise DuplicatedCommandError(
                    "%r can be declared only once per script" % schema.keyword,
                    title="duplicated command",
                    code=FaultCode.DUPLICATED_COMMAND,
                    keyword=schema.keyword,
                    hint="remove the earlier %s line or merge both into one" % schema.keyword,
                    docs=getdoc(FaultCode.DUPLICATED_COMMAND),
                )
            entries[:] = [entry for entry in entries if entry.keyword != schema.keyword]

        entries.append(command)
        return command

    def get(self, keyword, /):
        """Commands stored under keyword, in source order (possibly empty)."""
        if keyword in self._preambles:
            return list(self._preambles[keyword])
        return [action for action in self._actions if action.keyword == keyword]

    def freeze(self):
        self._frozen = True
        return self

    def __rich_repr__(self):
        yield "name", self._name
        yield "preambles", self.preambles
        yield "actions", self.actions

    def __repr__(self):
        return "script(name=%r, preambles=%r, actions=%r)" % (self._name, self._preambles, self._actions)


class Parser:
    """
    Line-by-line script parser.

    Parameters
    - registry: Registry of known commands (defaults to the standard set).
    - name: script name shown in fault headers ('source' option).
    - environ: mapping used for $NAME expansion; os.environ when omitted,
      read at parse time.
    - shell, fancy, colorful, deferred: fault surfacing flags (see module docs).
    """

    registry = mirror("registry")
    name = mirror("name")

    def __init__(
            self,
            registry=standard,
            /,
            *,
            name="<script>",
            environ=Unset,
            shell=False,
            fancy=False,
            colorful=True,
            deferred=False,
    ):
        if not isinstance(registry, Registry):
            raise TypeError("parser registry must be a registry")
        if not isinstance(name, str) or not (name := name.strip()):
            raise ValueError("parser name must be a non-empty string")
        self._registry = registry
        self._name = name
        self._environ = environ
        self.shell = bool(shell)
        self.fancy = bool(fancy)
        self.colorful = bool(colorful)
        self.deferred = bool(deferred)
        self._faults = []

    def trigger(self, fault, /, **options):
        if (
                not hasattr(fault, "__trigger__") or
                not callable(fault.__trigger__) or
                not hasattr(fault, "__replace__") or
                not callable(fault.__replace__)
        ):
            raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
        fault = copy.replace(
            fault,
            **options,
            source=self._name,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
            deferred=self.deferred,
        )
        if self.deferred:
            return self._faults.append(fault)
        trigger(fault)

    def _build(self, line, number):
        keyword, raw = split(line)
        schema = self._registry.lookup(keyword)

        tokens = expand(
            raw,
            coalesce(self._environ, os.environ),
            keyword=keyword,
            report=functools.partial(self.trigger, line=number),
        )

        return bind(schema, tokens, foreign=self._registry.foreign(schema))

    def _finalize(self):
        """
        surface what a deferred parse collected: warnings first, then all
        errors at once as a ScriptExit.
        """
        exceptions = []
        for fault in self._faults:
            if isinstance(fault, ScriptException):
                exceptions.append(fault)
            elif isinstance(fault, ScriptWarning):
                trigger(fault)
            else:
                raise RuntimeError("unexpected fault")
        self._faults.clear()

        if not exceptions:
            return

        trigger(
            ScriptExit(exceptions),
            source=self._name,
            shell=self.shell,
            fancy=self.fancy,
            colorful=self.colorful,
            deferred=self.deferred,
        )

    def parse(self, source, /):
        """
        Parse a whole script.

        Parameters
        - source: str (a document, split on line breaks) or an iterable of
          lines (a list, an open text file, ...).

        Returns
        - Script: frozen command table.

        Raises
        - ScriptException subclasses (default mode) or ScriptExit (deferred).
        - TypeError: source is neither a string nor an iterable of strings.
        """
        if isinstance(source, str):
            lines = source.splitlines()
        elif isinstance(source, Iterable):
            lines = source
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        script = Script(self._name)
        self._faults.clear()

        for number, line in enumerate(lines, start=1):
            if not isinstance(line, str):
                raise TypeError("parse() argument must be a string or an iterable of strings")
            if not (line := line.strip()) or line.startswith("#"):
                continue
            try:
                command = script.insert(self._build(line, number))
            except ScriptException as fault:
                logger.debug("%s:%d: %s", self._name, number, fault.message)
                self.trigger(fault, line=number)
                continue
            logger.debug("%s:%d: bound %r", self._name, number, command)

        self._finalize()
        return script.freeze()


def parse(source, /, registry=standard, **options):
    """
    Parse source with a throwaway Parser.

    options are forwarded to Parser (name, environ, shell, fancy, colorful,
    deferred).
    """
    return Parser(registry, **options).parse(source)


__all__ = (
    "Script",
    "Parser",
    "parse",
)
