"""
Arguments module behavioral tests (tokenizer, argument bag, claim order).

Scope
- Validate the lexical grammar: switches, inline values, operands, `@command`
  declarations and the `--` end-of-options marker.
- Validate malformed input faults and their payload (raw element, index).
- Validate the consume-once accessors of ArgumentBag and the claim order
  between take_option / take_flag / take_operand.

Conventions
- Test method names follow CamelCase per project convention.
- Inputs are sys.argv-shaped: the program name always comes first.
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase, mock

from bindargs import (
    ArgumentBag,
    EmptyType,
    MalformedFlagError,
    MalformedOptionError,
    Operand,
    Switch,
    SwitchWithValue,
    TooManyCommandsError,
    empty,
    parse,
    parse_env,
)


class TestTokens(TestCase):
    """Behavioral tests for the token types and the tombstone."""

    def testSwitchCanonicalText(self):
        self.assertEqual(str(Switch("v")), "-v")
        self.assertEqual(str(Switch("verbose")), "--verbose")

    def testSwitchWithValueCanonicalText(self):
        self.assertEqual(str(SwitchWithValue("l", "3")), "-l=3")
        self.assertEqual(str(SwitchWithValue("level", "")), "--level=")

    def testOperandEqualityIncludesPosition(self):
        self.assertEqual(Operand(0, "a"), Operand(0, "a"))
        self.assertNotEqual(Operand(0, "a"), Operand(1, "a"))
        self.assertNotEqual(Switch("ab"), Operand(0, "ab"))

    def testEmptyIsFalsySingleton(self):
        self.assertIs(EmptyType(), empty)
        self.assertFalse(empty)
        self.assertEqual(str(empty), "")
        self.assertEqual(repr(empty), "empty")

    def testEmptyTypeCannotBeSubclassed(self):
        with self.assertRaises(TypeError):
            class Other(EmptyType):
                pass


class TestParse(TestCase):
    """Behavioral tests for parse()."""

    def testProgramNameOnly(self):
        bag = parse(["prog"])
        self.assertEqual(bag.program_name, "prog")
        self.assertTrue(bag.is_empty())
        self.assertEqual(len(bag), 0)
        self.assertIsNone(bag.command)

    def testNoArgumentsAtAll(self):
        bag = parse([])
        self.assertEqual(bag.program_name, "")
        self.assertTrue(bag.is_empty())

    def testTokenKinds(self):
        bag = parse(["p", "--verbose", "-v", "--level=3", "-l=3", "file"])
        self.assertEqual(bag.tokens, (
            Switch("verbose"),
            Switch("v"),
            SwitchWithValue("level", "3"),
            SwitchWithValue("l", "3"),
            Operand(0, "file"),
        ))

    def testStringPromptIsSplitShellStyle(self):
        bag = parse("prog --name='a b' target")
        self.assertEqual(bag.program_name, "prog")
        self.assertEqual(bag.tokens, (SwitchWithValue("name", "a b"), Operand(0, "target")))

    def testValueKeepsLaterEqualSigns(self):
        bag = parse(["p", "--url=a=b"])
        self.assertEqual(bag.take_option("url"), "a=b")

    def testEmptyInlineValue(self):
        bag = parse(["p", "--key="])
        self.assertEqual(bag.take_option("key"), "")

    def testOperandsAreNumberedInOrder(self):
        bag = parse(["p", "a", "--x", "b", "c"])
        self.assertEqual(
            [token for token in bag.tokens if isinstance(token, Operand)],
            [Operand(0, "a"), Operand(1, "b"), Operand(2, "c")],
        )

    def testBlankElementsAreSkipped(self):
        bag = parse(["p", "", "   ", "a"])
        self.assertEqual(bag.tokens, (Operand(0, "a"),))

    def testEndOfOptionsMarker(self):
        bag = parse(["p", "a", "--", "--b", "-c=1", "--"])
        self.assertEqual(bag.tokens, (Operand(0, "a"),))
        self.assertEqual(bag.ignored, ("--b", "-c=1", "--"))

    def testMalformedInputAfterMarkerIsKept(self):
        bag = parse(["p", "--", "-bad", "--x"])
        self.assertTrue(bag.is_empty())
        self.assertEqual(bag.take_ignored(), ["-bad", "--x"])

    def testCommandDeclaration(self):
        bag = parse(["p", "@build", "x"])
        self.assertEqual(bag.command, "build")
        self.assertEqual(bag.tokens, (Operand(0, "x"),))

    def testCommandDeclarationAfterBlankElement(self):
        self.assertEqual(parse(["p", " ", "@build"]).command, "build")

    def testLateAtSignIsAnOperand(self):
        bag = parse(["p", "x", "@y"])
        self.assertIsNone(bag.command)
        self.assertEqual(bag.tokens, (Operand(0, "x"), Operand(1, "@y")))

    def testBareAtSignIsAnOperand(self):
        bag = parse(["p", "@"])
        self.assertIsNone(bag.command)
        self.assertEqual(bag.tokens, (Operand(0, "@"),))

    def testBareAtSignAfterCommandRaises(self):
        with self.assertRaises(TooManyCommandsError) as ctx:
            parse(["p", "@build", "@"])
        self.assertEqual(ctx.exception.raw, "@")
        self.assertEqual(ctx.exception.index, 2)

    def testTooManyCommandsRaises(self):
        with self.assertRaises(TooManyCommandsError) as ctx:
            parse(["p", "@a", "x", "@b"])
        self.assertEqual(ctx.exception.raw, "@b")
        self.assertEqual(ctx.exception.index, 3)

    def testNonStringElementsRaise(self):
        with self.assertRaises(TypeError):
            parse(42)
        with self.assertRaises(TypeError):
            parse(["p", 3])
        with self.assertRaises(TypeError):
            parse([1])

    def testParseEnvReadsSysArgv(self):
        with mock.patch.object(sys, "argv", ["prog", "--x", "y"]):
            bag = parse_env()
        self.assertEqual(bag.program_name, "prog")
        self.assertEqual(bag.tokens, (Switch("x"), Operand(0, "y")))


class TestMalformedSwitches(TestCase):
    """Behavioral tests for lexical faults."""

    def testMalformedFlags(self):
        for raw in ("--s", "-long", "-"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedFlagError) as ctx:
                    parse(["p", raw])
                self.assertEqual(ctx.exception.raw, raw)
                self.assertEqual(ctx.exception.index, 1)

    def testMalformedOptions(self):
        for raw in ("--s=value", "--=value", "-long=value", "-=value"):
            with self.subTest(raw=raw):
                with self.assertRaises(MalformedOptionError) as ctx:
                    parse(["p", raw])
                self.assertEqual(ctx.exception.raw, raw)

    def testIndexCountsFromTheProgramName(self):
        with self.assertRaises(MalformedFlagError) as ctx:
            parse(["p", "a", "--x"])
        self.assertEqual(ctx.exception.index, 2)
        self.assertIn("second", str(ctx.exception))


class TestArgumentBag(TestCase):
    """Behavioral tests for the consume-once accessors."""

    def testFlagThenOperandClaimOrder(self):
        bag = parse(["p", "--opt", "v"])
        self.assertTrue(bag.take_flag("opt"))
        self.assertEqual(bag.take_operand(0), "v")
        self.assertTrue(bag.is_empty())

    def testOptionClaimsFollowingOperand(self):
        bag = parse(["p", "--opt", "v"])
        self.assertEqual(bag.take_option("opt"), "v")
        self.assertTrue(bag.is_empty())
        self.assertIsNone(bag.take_operand(0))

    def testOptionBeforeSwitchTakesNothing(self):
        bag = parse(["p", "--opt", "--x"])
        self.assertIsNone(bag.take_option("opt"))
        self.assertEqual(len(bag), 2)
        self.assertTrue(bag.take_flag("opt"))

    def testOptionAtTheEndTakesNothing(self):
        bag = parse(["p", "--opt"])
        self.assertIsNone(bag.take_option("opt"))
        self.assertEqual(len(bag), 1)

    def testFirstSameNamedSwitchDecides(self):
        bag = parse(["p", "--opt", "--x", "--opt=2"])
        self.assertIsNone(bag.take_option("opt"))

    def testRepeatedOptionsAreTakenInOrder(self):
        bag = parse(["p", "--opt=1", "--opt=2"])
        self.assertEqual(bag.take_option("opt"), "1")
        self.assertEqual(bag.take_option("opt"), "2")
        self.assertIsNone(bag.take_option("opt"))

    def testFlagIgnoresInlineValues(self):
        bag = parse(["p", "--verbose=1"])
        self.assertFalse(bag.take_flag("verbose"))
        self.assertEqual(len(bag), 1)

    def testTakeFlagIsConsumeOnce(self):
        bag = parse(["p", "-v"])
        self.assertTrue(bag.take_flag("v"))
        self.assertFalse(bag.take_flag("v"))

    def testOperandPositionsNeverShift(self):
        bag = parse(["p", "a", "b", "c"])
        self.assertEqual(bag.take_operand(1), "b")
        self.assertIsNone(bag.take_operand(1))
        self.assertEqual(bag.take_operand(), "a")
        self.assertEqual(bag.take_operand(2), "c")
        self.assertIsNone(bag.take_operand())
        self.assertIsNone(bag.take_operand(7))

    def testTakeCommandOnce(self):
        bag = parse(["p", "@run"])
        self.assertEqual(bag.take_command(), "run")
        self.assertIsNone(bag.take_command())

    def testTakeRemainingCanonicalText(self):
        bag = parse(["p", "-v", "--level=3", "x", "--flag", "--", "tail"])
        bag.take_flag("flag")
        self.assertEqual(bag.take_remaining(), ["-v", "--level=3", "x"])
        self.assertEqual(bag.take_remaining(), [])
        self.assertTrue(bag.is_empty())
        self.assertEqual(bag.ignored, ("tail",))

    def testTakeRemainingIncludesCommand(self):
        bag = parse(["p", "@build", "x"])
        self.assertEqual(bag.take_remaining(), ["@build", "x"])
        self.assertIsNone(bag.take_command())
        self.assertTrue(bag.is_empty())

    def testUntakenCommandKeepsBagNonEmpty(self):
        bag = parse(["p", "@build"])
        self.assertFalse(bag.is_empty())
        self.assertEqual(bag.take_command(), "build")
        self.assertTrue(bag.is_empty())

    def testTakeIgnoredOnce(self):
        bag = parse(["p", "--", "a", "b"])
        self.assertEqual(bag.take_ignored(), ["a", "b"])
        self.assertEqual(bag.take_ignored(), [])

    def testTokensSnapshotSkipsTakenSlots(self):
        bag = parse(["p", "-a", "-b"])
        bag.take_flag("a")
        self.assertEqual(bag.tokens, (Switch("b"),))

    def testBagFromTokens(self):
        bag = ArgumentBag("p", [Switch("v"), empty, Operand(1, "x")])
        self.assertEqual(len(bag), 2)
        self.assertEqual(bag.take_operand(1), "x")


if __name__ == "__main__":
    unittest.main()
