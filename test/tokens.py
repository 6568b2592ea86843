"""
Tokenizer and expander tests.

Scope
- Validate whitespace splitting, quote removal, and quote-state tracking.
- Validate that backslashes are ordinary characters.
- Validate malformed quote faults.
- Validate $NAME / ${NAME} / param:$NAME expansion, verbatim single-quoted
  tokens, and unset-variable reporting.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
import warnings
from unittest import TestCase

from linescript.faults import FaultCode, MalformedQuoteError, UnsetVariableWarning
from linescript.tokens import Token, expand, split, tokenize


def texts(line):
    return [token.text for token in tokenize(line)]


class TestTokenize(TestCase):
    """Behavioral tests for tokenize() and split()."""

    def testWhitespaceRunsSeparateTokens(self):
        self.assertEqual(texts("OUTPUT   a\tb  "), ["OUTPUT", "a", "b"])

    def testQuotesAreRemoved(self):
        self.assertEqual(texts("RUN 'uname -a' \"df -h\""), ["RUN", "uname -a", "df -h"])

    def testQuoteInsideToken(self):
        self.assertEqual(texts("OUTPUT path:'a b'"), ["OUTPUT", "path:a b"])

    def testOtherQuoteInsideQuotedSpan(self):
        self.assertEqual(texts("RUN \"echo 'hi there'\""), ["RUN", "echo 'hi there'"])

    def testBackslashesAreKept(self):
        self.assertEqual(texts(r"OUTPUT C:\out\bundle.tar.gz"), ["OUTPUT", r"C:\out\bundle.tar.gz"])

    def testTrailingBackslashIsKept(self):
        self.assertEqual(texts("OUTPUT foo\\"), ["OUTPUT", "foo\\"])

    def testBackslashDoesNotEscapeWhitespace(self):
        self.assertEqual(texts(r"OUTPUT a\ b"), ["OUTPUT", "a\\", "b"])

    def testHashIsNotAComment(self):
        self.assertEqual(texts("RUN echo#1"), ["RUN", "echo#1"])

    def testEmptyQuotesMakeAnEmptyToken(self):
        self.assertEqual(texts("OUTPUT ''"), ["OUTPUT", ""])

    def testSingleQuotesMarkVerbatim(self):
        self.assertEqual(tokenize("OUTPUT '$HOME' \"$HOME\" $HOME"), [
            Token("OUTPUT"),
            Token("$HOME", verbatim=True),
            Token("$HOME"),
            Token("$HOME"),
        ])

    def testPartlySingleQuotedTokenIsVerbatim(self):
        self.assertEqual(tokenize("OUTPUT path:'$X'")[1], Token("path:$X", verbatim=True))

    def testUnterminatedQuoteRaises(self):
        with self.assertRaises(MalformedQuoteError) as context:
            tokenize("OUTPUT 'foo/bar")
        self.assertEqual(context.exception.code, FaultCode.MALFORMED_QUOTE)
        self.assertEqual(context.exception.keyword, "OUTPUT")
        self.assertEqual(context.exception.options["input"], "OUTPUT 'foo/bar")
        self.assertEqual(context.exception.options["position"], 7)

    def testUnterminatedDoubleQuoteRaises(self):
        with self.assertRaises(MalformedQuoteError):
            tokenize("RUN \"ls")

    def testSplitSeparatesKeyword(self):
        self.assertEqual(split("COPY /a /b"), ("COPY", [Token("/a"), Token("/b")]))

    def testSplitEmptyLineRaises(self):
        with self.assertRaises(ValueError):
            split("   ")


class TestExpand(TestCase):
    """Behavioral tests for expand()."""

    environ = {"HOME": "/home/ops", "PORT": "2222", "QUALIFIED": "path:x", "NAME": "bundle"}

    def testPlainTokensPassThrough(self):
        self.assertEqual(expand(["foo", "path:bar"], self.environ), [Token("foo"), Token("path:bar")])

    def testBareVariableIsLiteral(self):
        self.assertEqual(expand(["$HOME"], self.environ), [Token("/home/ops", literal=True)])

    def testBracedVariableIsLiteral(self):
        self.assertEqual(expand(["${HOME}"], self.environ), [Token("/home/ops", literal=True)])

    def testLeadingReferenceWithSuffix(self):
        self.assertEqual(expand(["$HOME/out.tar.gz"], self.environ), [Token("/home/ops/out.tar.gz", literal=True)])

    def testEveryReferenceIsSubstituted(self):
        self.assertEqual(
            expand(["${HOME}/$NAME.tar.gz"], self.environ),
            [Token("/home/ops/bundle.tar.gz", literal=True)],
        )

    def testQualifiedVariableKeepsPrefix(self):
        self.assertEqual(expand(["port:$PORT"], self.environ), [Token("port:2222")])

    def testQualifiedVariableWithSuffix(self):
        self.assertEqual(expand(["path:$HOME/out"], self.environ), [Token("path:/home/ops/out")])

    def testExpansionIsNotRescanned(self):
        self.assertEqual(expand(["$QUALIFIED"], self.environ), [Token("path:x", literal=True)])

    def testTokensNotStartingWithReferenceAreKept(self):
        self.assertEqual(expand(["a$HOME", "$1", "$"], self.environ), [Token("a$HOME"), Token("$1"), Token("$")])

    def testVerbatimTokensAreNotExpanded(self):
        tokens = [Token("$HOME", verbatim=True), Token("path:$HOME", verbatim=True)]
        self.assertEqual(expand(tokens, self.environ), tokens)

    def testUnicodePrefixIsNotQualified(self):
        # only ASCII identifiers name parameters, so the value is left alone
        self.assertEqual(expand(["pâth:$HOME"], self.environ), [Token("pâth:$HOME")])

    def testUnsetVariableWarnsAndExpandsEmpty(self):
        with self.assertWarns(UnsetVariableWarning) as context:
            tokens = expand(["$MISSING"], {}, keyword="OUTPUT")
        self.assertEqual(tokens, [Token("", literal=True)])
        self.assertEqual(context.warning.options["variable"], "MISSING")
        self.assertEqual(context.warning.options["keyword"], "OUTPUT")

    def testUnsetVariableIsReportedToCallback(self):
        reported = []
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            tokens = expand(["path:$MISSING/x"], {}, report=reported.append)
        self.assertEqual(tokens, [Token("path:/x")])
        self.assertEqual(len(reported), 1)
        self.assertIsInstance(reported[0], UnsetVariableWarning)

    def testSetVariableDoesNotWarn(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            expand(["$HOME"], self.environ)


if __name__ == "__main__":
    unittest.main()
