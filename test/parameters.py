"""
Parameters module behavioral tests (registration rules and matching loop).

Scope
- Validate registration invariants: names, ordering of prefixed/raw, value slots.
- Validate that failed registrations leave the set unchanged.
- Validate the NAMED -> RAW -> DONE matching phases against a session.
- Validate combined short flags, duplicates, missing values and conversions.

Conventions
- Test method names follow CamelCase per project convention.
- Parameter sets are exercised standalone through a Session.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commandtree import (
    Parameters,
    Session,
    String,
    Integer,
    FaultCode,
    RegistrationError,
    InvalidArgumentError,
    ParameterNotFoundError,
    DuplicateParameterError,
    MissingValueError,
    MissingRequiredError,
    ConversionError,
)


class Recorder:
    """minimal value slot remembering every token it receives"""

    def __init__(self):
        self.tokens = []

    def set(self, token):
        self.tokens.append(token)


class TestRegistration(TestCase):
    """Behavioral tests for add_param/add_raw_param."""

    def testRegistrationOrderIsKept(self):
        parameters = Parameters()
        parameters.add_param("alpha", "a")
        parameters.add_param("beta")
        parameters.add_raw_param("gamma")
        self.assertEqual([parameter.name for parameter in parameters], ["alpha", "beta", "gamma"])
        self.assertEqual(parameters.last.name, "gamma")

    def testDuplicateLongNameRejected(self):
        parameters = Parameters()
        parameters.add_param("alpha")
        with self.assertRaises(RegistrationError) as caught:
            parameters.add_param("alpha")
        self.assertEqual(caught.exception.code, FaultCode.DUPLICATE_NAME)
        self.assertEqual(len(parameters), 1)

    def testDuplicateShortNameRejected(self):
        parameters = Parameters()
        parameters.add_param("alpha", "a")
        with self.assertRaises(RegistrationError):
            parameters.add_param("agnes", "a")
        self.assertNotIn("agnes", parameters)

    def testShortNameMustBeOneCharacter(self):
        parameters = Parameters()
        with self.assertRaises(RegistrationError):
            parameters.add_param("agnes", "agnes")
        self.assertEqual(len(parameters), 0)

    def testInvalidLongNamesRejected(self):
        parameters = Parameters()
        for name in ("", "--boo", "-b"):
            with self.subTest(name=name):
                with self.assertRaises(RegistrationError):
                    parameters.add_param(name)
        with self.assertRaises(RegistrationError):
            parameters.add_param(42)  # type: ignore[arg-type]

    def testRequiredPrefixedNeedsValue(self):
        parameters = Parameters()
        with self.assertRaises(RegistrationError) as caught:
            parameters.add_param("boo", required=True)
        self.assertEqual(caught.exception.code, FaultCode.MISSING_VALUE_SLOT)

    def testValueMustBeSettable(self):
        parameters = Parameters()
        with self.assertRaises(RegistrationError) as caught:
            parameters.add_param("boo", required=True, value=1337)
        self.assertEqual(caught.exception.code, FaultCode.INVALID_VALUE_SLOT)
        self.assertEqual(len(parameters), 0)

    def testCustomSetterAccepted(self):
        parameters = Parameters()
        parameters.add_param("boo", required=True, value=Recorder())
        self.assertIn("boo", parameters)

    def testPrefixedAfterRawRejected(self):
        parameters = Parameters()
        parameters.add_raw_param("bar", required=True)
        for required, value in ((False, None), (False, String()), (True, String())):
            with self.subTest(required=required, value=value):
                with self.assertRaises(RegistrationError) as caught:
                    parameters.add_param("boo", required=required, value=value)
                self.assertEqual(caught.exception.code, FaultCode.PARAMETER_ORDER)
        self.assertEqual(len(parameters), 1)

    def testRawAfterOptionalRawRejected(self):
        parameters = Parameters()
        parameters.add_raw_param("bar", required=True)
        parameters.add_raw_param("baz")
        for required in (False, True):
            with self.subTest(required=required):
                with self.assertRaises(RegistrationError):
                    parameters.add_raw_param("boo", required=required)
        self.assertEqual([parameter.name for parameter in parameters], ["bar", "baz"])
        self.assertTrue(parameters.has_optional_raw)

    def testUsage(self):
        parameters = Parameters()
        parameters.add_param("flag")
        parameters.add_param("name", required=True, value=String())
        parameters.add_raw_param("path", required=True)
        parameters.add_raw_param("rest")
        self.assertEqual([parameter.usage for parameter in parameters], ["[--flag]", "<--name>", "<path>", "[rest]"])


class TestMatching(TestCase):
    """Behavioral tests for Parameters.parse over a session."""

    def setUp(self):
        self.parameters = Parameters()
        self.parameters.add_param("alice", "a")
        self.parameters.add_param("buick", "b")
        self.parameters.add_param("cecil", "c")
        self.parameters.add_param("filip", "f", value=String())

    def parse(self, *tokens):
        self.parameters.reset()
        session = Session(tokens)
        self.parameters.parse(session)
        return session

    def testCombinedMarksEveryFlag(self):
        session = self.parse("-abc")
        for name in ("alice", "buick", "cecil"):
            self.assertTrue(self.parameters.parsed(name))
        self.assertFalse(self.parameters.parsed("filip"))
        self.assertEqual(session.tokens, [])

    def testCombinedMixedWithLong(self):
        self.parse("--alice", "-bc", "-f", "filip")
        self.assertTrue(self.parameters.parsed("buick"))
        self.assertEqual(self.parameters.value("filip"), "filip")

    def testCombinedRepeatedCharacter(self):
        with self.assertRaises(DuplicateParameterError):
            self.parse("-aa")

    def testCombinedAfterSeparateFlag(self):
        with self.assertRaises(DuplicateParameterError):
            self.parse("-a", "-ab")

    def testCombinedUnknownCharacter(self):
        with self.assertRaises(ParameterNotFoundError):
            self.parse("-abX")

    def testCombinedValueBearing(self):
        with self.assertRaises(MissingValueError):
            self.parse("-abf", "filip")

    def testRepeatedShortFlag(self):
        with self.assertRaises(DuplicateParameterError):
            self.parse("-a", "-a")

    def testUnknownLong(self):
        with self.assertRaises(ParameterNotFoundError) as caught:
            self.parse("--bit")
        self.assertEqual(caught.exception.options["input"], "--bit")

    def testMissingValueAtEnd(self):
        with self.assertRaises(MissingValueError):
            self.parse("--filip")

    def testValueTakenVerbatim(self):
        self.parse("--filip", "--alice")
        self.assertEqual(self.parameters.value("filip"), "--alice")
        self.assertFalse(self.parameters.parsed("alice"))

    def testInvalidToken(self):
        with self.assertRaises(InvalidArgumentError):
            self.parse("---")

    def testStopsAtText(self):
        session = self.parse("-a", "next", "-b")
        self.assertEqual(session.tokens, ["next", "-b"])
        self.assertFalse(self.parameters.parsed("buick"))

    def testFlagRawValueIsName(self):
        self.parse("--alice")
        self.assertEqual(self.parameters.value("alice"), "alice")
        self.assertEqual(self.parameters.value("buick"), "")
        self.assertEqual(self.parameters.value("missing"), "")

    def testAllMatchedLeavesSurplus(self):
        session = self.parse("-abc", "-f", "x", "-a", "--bit")
        self.assertEqual(session.tokens, ["-a", "--bit"])
        self.assertEqual(self.parameters.value("filip"), "x")

    def testResetClearsState(self):
        self.parse("-a", "-f", "x")
        self.parameters.reset()
        self.assertFalse(self.parameters.parsed("alice"))
        self.assertIsNone(self.parameters.get("filip").raw_value)


class TestRawMatching(TestCase):
    """Behavioral tests for raw parameters and the RAW phase."""

    def setUp(self):
        self.bit = String()
        self.parameters = Parameters()
        self.parameters.add_param("bar", required=True, value=String())
        self.parameters.add_param("baz")
        self.parameters.add_raw_param("bit", required=True, value=self.bit)
        self.parameters.add_raw_param("bot")

    def parse(self, *tokens):
        self.parameters.reset()
        session = Session(tokens)
        self.parameters.parse(session)
        return session

    def testRequiredOnly(self):
        self.parse("--bar", "bar", "bit")
        self.assertEqual(self.bit.value, "bit")
        self.assertFalse(self.parameters.parsed("bot"))

    def testEverything(self):
        self.parse("--bar", "bar", "--baz", "bit", "bot")
        self.assertEqual(self.parameters.value("bot"), "bot")

    def testMissingPrefixed(self):
        with self.assertRaises(MissingRequiredError):
            self.parse("bit")

    def testMissingRaw(self):
        with self.assertRaises(MissingRequiredError) as caught:
            self.parse("--bar", "bar")
        self.assertEqual(caught.exception.options["input"], "bit")

    def testPrefixedAfterRawEndsMatching(self):
        session = self.parse("--bar", "bar", "bit", "--baz")
        self.assertEqual(session.tokens, ["--baz"])
        self.assertFalse(self.parameters.parsed("baz"))

    def testSurplusTextLeftInSession(self):
        session = self.parse("--bar", "bar", "bit", "bot", "boo")
        self.assertEqual(session.tokens, ["boo"])

    def testRawNotAddressableByName(self):
        with self.assertRaises(ParameterNotFoundError) as caught:
            self.parse("--bar", "bar", "--bit")
        self.assertEqual(caught.exception.options["input"], "--bit")
        self.assertIsNone(self.bit.value)


class TestConversion(TestCase):
    """Behavioral tests for value slot failures."""

    def testConversionErrorChainsCause(self):
        parameters = Parameters()
        parameters.add_param("port", "p", value=Integer())
        with self.assertRaises(ConversionError) as caught:
            parameters.parse(Session(["--port", "http"]))
        self.assertIsInstance(caught.exception.__cause__, ValueError)
        self.assertEqual(caught.exception.code, FaultCode.CONVERSION_FAILURE)

    def testSlotReceivesLiteralToken(self):
        recorder = Recorder()
        parameters = Parameters()
        parameters.add_raw_param("path", value=recorder)
        parameters.parse(Session(["./a b"]))
        self.assertEqual(recorder.tokens, ["./a b"])


if __name__ == "__main__":
    unittest.main()
