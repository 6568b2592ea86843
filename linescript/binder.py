"""
Argument binder: tokens of one line + a Schema → typed command.

Algorithm (one pass, left to right)
- literal tokens (variable expansions) are unqualified values.
- "name:rest" where name is declared by the schema binds name to rest; only
  the first colon separates, so rest may contain more colons.
- anything else is an unqualified value for the schema's default parameter.
- at most one unqualified value per line and each parameter at most once;
  otherwise TooManyArgumentsError.
- every required parameter must end up bound; otherwise MissingArgumentError.

Faults carry the keyword and the 1-based position of the offending token
after the keyword ('index'). MissingArgumentError instead carries 'tokens',
the number of arguments the line had. The parser adds the line number.
"""
from .faults import (
    FaultCode,
    InvalidParameterNameError,
    MissingArgumentError,
    TooManyArgumentsError,
    getdoc,
)
from .tokens import QUALIFIED, Token
from .utils import ordinal, pluralize


def _usage(schema):
    # "OUTPUT <path> | path:<value>" style reminder for hints.
    forms = []
    if schema.default is not None:
        forms.append("%s <%s>" % (schema.keyword, schema.default.name))
    forms.extend("%s %s:<value>" % (schema.keyword, name) for name in schema.names)
    return " or ".join(forms)


def _classify(schema, token, index, foreign):
    # (parameter name, value) for a token; name is None for unqualified values.
    if isinstance(token, str):
        token = Token(token)
    if token.literal:
        return None, token.text
    match = QUALIFIED.fullmatch(token.text)
    if match and match["name"] in schema:
        return match["name"], match["value"]
    if match and match["name"] in foreign:
        raise InvalidParameterNameError(
            "%s argument of %r names parameter %r, which %r does not declare" % (
                ordinal(index), schema.keyword, match["name"], schema.keyword
            ),
            title="invalid parameter name",
            code=FaultCode.INVALID_PARAMETER_NAME,
            keyword=schema.keyword,
            index=index,
            token=token.text,
            parameter=match["name"],
            hint="use %s, or quote the whole value and drop the prefix" % _usage(schema),
            docs=getdoc(FaultCode.INVALID_PARAMETER_NAME),
        )
    return None, token.text


def resolve(schema, tokens, /, *, foreign=frozenset()):
    """
    Bind tokens to the parameters of schema.

    Parameters
    - schema: the Schema of the line's keyword.
    - tokens: Token objects (see linescript.tokens.expand) or plain strings,
      which are treated as non-literal tokens.
    - foreign: parameter names of other commands that must not appear as a
      prefix (strict registries); empty means unknown prefixes fall back to
      unqualified binding.

    Returns
    - dict mapping parameter names to values, in token order.

    Raises
    - TooManyArgumentsError, MissingArgumentError, InvalidParameterNameError.
    """
    arguments = {}
    unqualified = 0
    default = schema.default
    index = 0

    for index, token in enumerate(tokens, start=1):
        name, value = _classify(schema, token, index, foreign)

        if name is None:
            unqualified += 1
            if default is None:
                raise TooManyArgumentsError(
                    "%s argument of %r is unqualified but %r has no default parameter" % (
                        ordinal(index), schema.keyword, schema.keyword
                    ),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    keyword=schema.keyword,
                    index=index,
                    token=value,
                    count=unqualified,
                    hint="name the parameter explicitly: %s" % _usage(schema),
                    docs=getdoc(FaultCode.TOO_MANY_ARGUMENTS),
                )
            if unqualified > 1:
                raise TooManyArgumentsError(
                    "%r accepts one unqualified argument but got %d (%s from %s position)" % (
                        schema.keyword, unqualified, pluralize("argument", unqualified), ordinal(index)
                    ),
                    title="too many arguments",
                    code=FaultCode.TOO_MANY_ARGUMENTS,
                    keyword=schema.keyword,
                    index=index,
                    token=value,
                    count=unqualified,
                    hint="quote values that contain spaces (for example: %s 'a b')" % schema.keyword,
                    docs=getdoc(FaultCode.TOO_MANY_ARGUMENTS),
                )
            name = default.name

        if name in arguments:
            raise TooManyArgumentsError(
                "%s argument of %r binds parameter %r a second time" % (ordinal(index), schema.keyword, name),
                title="too many arguments",
                code=FaultCode.TOO_MANY_ARGUMENTS,
                keyword=schema.keyword,
                index=index,
                token=value,
                parameter=name,
                count=2,
                hint="keep a single %s; each parameter can be given only once per line" % name,
                docs=getdoc(FaultCode.TOO_MANY_ARGUMENTS),
            )
        arguments[name] = value

    if missing := [parameter.name for parameter in schema.required if parameter.name not in arguments]:
        raise MissingArgumentError(
            "%r is missing required %s %s" % (
                schema.keyword, pluralize("parameter", len(missing)), ", ".join(map(repr, missing))
            ),
            title="missing argument",
            code=FaultCode.MISSING_ARGUMENT,
            keyword=schema.keyword,
            parameter=missing[0],
            missing=missing,
            tokens=index,
            hint="try %s" % _usage(schema),
            docs=getdoc(FaultCode.MISSING_ARGUMENT),
        )

    return arguments


def bind(schema, tokens, /, *, foreign=frozenset()):
    """
    Bind tokens against schema and build the command object.

    Nothing is constructed when binding fails, so callers never see a partial
    command.
    """
    return schema.factory(resolve(schema, tokens, foreign=foreign))


__all__ = (
    "resolve",
    "bind",
)
