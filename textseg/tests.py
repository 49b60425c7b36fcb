#!/usr/bin/env python3

# This testing code deliberately does nasty stuff so mypy isn't helpful
# mypy: ignore-errors
# type: ignore

import itertools
import os
import pathlib
import random
import subprocess
import sys
import tempfile
import typing
import unittest
import zipfile

import textseg
import textseg._engine
import textseg._tables
import textseg._ucd
import textseg.grapheme
import textseg.sentence
import textseg.word

from textseg import START, Step, WordKind

coverage_run = os.environ.get("COVERAGE_RUN", "") == "true"

try:
    itertools.pairwise
except AttributeError:
    # Py <= 3.9 doesn't have it.  We monkeypatch because only
    # referenced in this test code

    def _pairwise(iterable):
        a, b = itertools.tee(iterable)
        next(b, None)
        return zip(a, b)

    itertools.pairwise = _pairwise


class Unicode(unittest.TestCase):
    # ÷ marks where a boundary is expected
    break_tests = {
        "grapheme": (
            "a÷🇦🇧÷🇨🇩÷b",
            "\r\n÷a",
            "ᄀ각",
            "e\u0301÷x",
            "क\u094dष÷a",
            "न÷म÷स\u094dत\u0947",
            "👩\u200d👩÷x",
            "👍🏽÷!",
            "\u0600a",
            "\u0600÷\r",
            "a\u0903÷b",
            "\u0001÷\u0308÷b",
            "각÷ᄀ",
            "☺\ufe0f÷☺",
            "\u0c95\u0cf3÷a",
        ),
        "word": (
            "can't÷ ÷go",
            "3.14÷ ÷x",
            "a÷.÷ ÷b",
            "🇦🇧÷🇨",
            "カタ÷あ÷い",
            "a\u0308b",
            "foo_bar÷ ÷baz",
            "\r\n÷\r\n",
            "😀\u200d😀÷x",
            "  ÷a",
            "1,000÷ ÷x",
            "a÷:÷ ÷b",
            "\u0600\u0661\u0662",
            "\u070fab",
            "\u19da1",
            "a÷ \u200d÷ ÷b",
        ),
        "sentence": (
            "Hello world. ÷This is a test.",
            'He said "Go." ÷She left.',
            "3.4 is a number.",
            "etc. the end.",
            "Hi!\n÷There",
            "a\r\n÷b",
            "What?! ÷No way... ÷Really?",
            "Is it? ÷Yes.",
            "Hello.\u200b ÷World.",
            "Hi.÷🏽 There",
        ),
    }

    def parse_break_test(self, text: str) -> tuple[str, list[int]]:
        test = ""
        breaks = []
        for c in text:
            if c == "÷":
                breaks.append(len(test))
            else:
                test += c
        breaks.append(len(test))
        return test, breaks

    def testBreaks(self):
        "Verifies breaktest locations"
        for kind in "grapheme", "word", "sentence":
            meth = getattr(textseg, f"{kind}_next_break")
            meth_next = getattr(textseg, f"{kind}_next")
            meth_iter_with_offsets = getattr(textseg, f"{kind}_iter_with_offsets")
            meth_iter = getattr(textseg, f"{kind}_iter")

            # type and range checking
            self.assertRaises(TypeError, meth)
            self.assertRaises(TypeError, meth, 3)
            self.assertRaises(TypeError, meth, b"abc")
            self.assertRaises(TypeError, meth, "some text", "hello")
            self.assertRaises(TypeError, meth, "some text", 2.0)
            self.assertRaises(ValueError, meth, "some text", -1)
            self.assertRaises(ValueError, meth, "some text", 1000)
            self.assertRaises(ValueError, meth, "some text", sys.maxsize)
            # we can reference index at len
            self.assertEqual(4, meth("some", 4))
            self.assertEqual((4, 4), meth_next("some", 4))
            self.assertEqual(tuple(), tuple(meth_iter("some", 4)))
            self.assertEqual(tuple(), tuple(meth_iter_with_offsets("some", 4)))

            for text in self.break_tests[kind]:
                test, breaks = self.parse_break_test(text)

                offset = 0
                seen = []
                while offset < len(test):
                    offset = meth(test, offset)
                    seen.append(offset)

                self.assertEqual(seen, breaks, f"{kind} {text!r}")

                segments = [test[b:e] for b, e in itertools.pairwise([0] + breaks)]
                self.assertEqual(list(meth_iter(test)), segments)
                self.assertEqual(
                    list(meth_iter_with_offsets(test)),
                    [(b, e, test[b:e]) for b, e in itertools.pairwise([0] + breaks)],
                )
                self.assertEqual("".join(meth_iter(test)), test)

                if kind != "word":
                    self.assertEqual(meth_next(test), (0, breaks[0]))

    def testWordNext(self):
        "Words skipping spaces and punctuation"
        text = "  Hello, world! "
        spans = []
        offset = 0
        while True:
            start, end = textseg.word_next(text, offset)
            if start == end:
                break
            spans.append(text[start:end])
            offset = end
        self.assertEqual(spans, ["Hello", "world"])
        self.assertEqual(textseg.word_next(text, 14), (len(text), len(text)))
        self.assertEqual(textseg.word_next("...", 0), (3, 3))
        self.assertEqual(textseg.word_next("", 0), (0, 0))

    def testBreaksFull(self):
        "Tests full official break tests (if available)"

        testzip = extended_testing_file("UCD.zip")
        if not testzip:
            return

        with zipfile.ZipFile(testzip) as zip:
            for kind, base in (
                ("grapheme", "Grapheme"),
                ("word", "Word"),
                ("sentence", "Sentence"),
            ):
                data = zip.read(f"auxiliary/{base}BreakTest.txt")
                first = data.decode("utf8").splitlines()[0]
                if f"-{ textseg.unicode_version }." not in first:
                    self.skipTest(f"UCD.zip is not Unicode { textseg.unicode_version }: { first }")
                with tempfile.NamedTemporaryFile("wb", prefix=f"textsegbreaks-{ kind }", suffix=".txt") as tmpf:
                    tmpf.write(data)
                    tmpf.flush()

                    proc = self.exec("breaktest", kind, tmpf.name)
                    self.assertEqual(proc.returncode, 0, f"Failed {proc=}")

    def exec(self, *args):
        if coverage_run:
            cov_params = ["-m", "coverage", "run", "--source", "textseg", "-p"]
        else:
            cov_params = []

        return subprocess.run(
            [sys.executable] + cov_params + ["-m", "textseg"] + list(args),
            capture_output=True,
            cwd=pathlib.Path(__file__).parent.parent,
        )

    def testCounts(self):
        "Counting graphemes, words, and sentences"
        for text, graphemes, width in (
            ("Hello", 5, 5),
            ("🇩🇪", 1, 2),
            ("👩\u200d❤\ufe0f\u200d👩", 1, 2),
            ("a\u0327", 1, 1),
            ("世界", 2, 4),
            ("", 0, 0),
            ("नमस\u094dत\u0947", 3, None),
        ):
            self.assertEqual(textseg.grapheme_count(text), graphemes, text)
            self.assertEqual(textseg.grapheme_count(text.encode("utf8")), graphemes, text)
            self.assertEqual(textseg.grapheme_length(text), graphemes, text)
            if width is not None:
                self.assertEqual(textseg.text_width(text), width, text)
                self.assertEqual(textseg.text_width(text.encode("utf8")), width, text)

        self.assertEqual(textseg.word_count(""), 0)
        self.assertEqual(textseg.sentence_count(""), 0)
        self.assertEqual(textseg.word_count("Hello, world!"), 2)
        self.assertEqual(textseg.word_count(b"can't stop"), 2)
        self.assertEqual(textseg.word_count("   "), 0)
        self.assertEqual(textseg.sentence_count("Mr. Smith went to the U.S.A. yesterday."), 1)
        self.assertEqual(textseg.sentence_count("What?! No way... Really?"), 3)
        self.assertEqual(list(textseg.sentence_iter("What?! No way... Really?")), ["What?! ", "No way... ", "Really?"])

        self.assertEqual(textseg.grapheme_length("abc", 1), 2)
        self.assertEqual(textseg.grapheme_length("abc", 3), 0)
        self.assertRaises(ValueError, textseg.grapheme_length, "abc", 4)

        for meth in textseg.grapheme_count, textseg.word_count, textseg.sentence_count:
            self.assertRaises(TypeError, meth, 3)
            self.assertRaises(TypeError, meth, None)
            self.assertRaises(TypeError, meth, ["a"])

    def testTailoring(self):
        "Hyphens, email addresses, and abbreviations"
        self.assertEqual(textseg.word_count("well-known fact"), 2)
        self.assertEqual(textseg.word_count("well-known fact", tailored=False), 3)
        self.assertEqual(textseg.word_count("user@example.com"), 1)
        self.assertEqual(textseg.word_count("user@example.com", tailored=False), 2)
        self.assertEqual(list(textseg.word_iter("re\u2010do it")), ["re\u2010do", " ", "it"])
        # not between letters
        self.assertEqual(list(textseg.word_iter("a - b")), ["a", " ", "-", " ", "b"])
        self.assertEqual(list(textseg.word_iter("@home")), ["@", "home"])

        for text, tailored, untailored in (
            ("Mr. Smith went.", 1, 2),
            ("He is Dr. Who.", 1, 2),
            ("J. R. R. Tolkien wrote.", 1, 4),
            ("I saw Ann. She left.", 2, 2),
            ("It was late. The end.", 2, 2),
            ("Mrs. Jones. Mr. Brown.", 2, 4),
        ):
            self.assertEqual(textseg.sentence_count(text), tailored, text)
            self.assertEqual(textseg.sentence_count(text, tailored=False), untailored, text)

        self.assertEqual(
            list(textseg.sentence_iter("Mr. Smith went.", tailored=False)), ["Mr. ", "Smith went."]
        )

    def testWordKind(self):
        "Classifying word segments"
        for segment, kind in (
            ("hello", WordKind.LETTER),
            ("123", WordKind.LETTER),
            ("can't", WordKind.LETTER),
            ("カタ", WordKind.LETTER),
            ("世", WordKind.LETTER),
            (" ", WordKind.WHITESPACE),
            ("\r\n", WordKind.WHITESPACE),
            ("\u3000", WordKind.WHITESPACE),
            (",", WordKind.PUNCTUATION),
            ("😀", WordKind.PUNCTUATION),
            ("🇩🇪", WordKind.PUNCTUATION),
            ("", WordKind.NONE),
            (b"abc", WordKind.LETTER),
            (b"", WordKind.NONE),
        ):
            self.assertEqual(textseg.word_kind(segment), kind, segment)

        segments = list(textseg.word_iter("Hello, world!"))
        self.assertEqual(segments, ["Hello", ",", " ", "world", "!"])
        self.assertEqual(
            [textseg.word_kind(s) for s in segments],
            [WordKind.LETTER, WordKind.PUNCTUATION, WordKind.WHITESPACE, WordKind.LETTER, WordKind.PUNCTUATION],
        )

    def testStep(self):
        "Single steps"
        res = textseg.grapheme_step("e\u0301x")
        self.assertIsInstance(res, Step)
        self.assertEqual(res, Step("e\u0301", "x", 1, res.state))
        res = textseg.grapheme_step(res.remainder, res.state)
        self.assertEqual((res.segment, res.remainder, res.width), ("x", "", 1))

        for meth in textseg.grapheme_step, textseg.word_step, textseg.sentence_step:
            width = 0 if meth is textseg.grapheme_step else None
            self.assertEqual(meth(""), Step("", "", width, START))
            self.assertEqual(meth(b""), Step(b"", b"", width, START))
            self.assertEqual(meth("", 3), Step("", "", width, 3))
            self.assertRaises(TypeError, meth, 3)
            self.assertRaises(TypeError, meth, None)
            self.assertRaises(TypeError, meth, "abc", "1")
            self.assertRaises(TypeError, meth, "abc", 1.0)
            self.assertRaises(TypeError, meth, "abc", True)
            self.assertRaises(ValueError, meth, "abc", 9999)
            self.assertRaises(ValueError, meth, "abc", -2)
            # keyword only
            self.assertRaises(TypeError, meth, "abc", START, False)

            res = meth(b"hello")
            self.assertIsInstance(res.segment, bytes)
            self.assertEqual(res.segment + res.remainder, b"hello")
            res = meth(bytearray(b"hi"))
            self.assertIsInstance(res.remainder, bytes)
            self.assertEqual(res.segment + res.remainder, b"hi")

        self.assertRaises(ValueError, textseg.grapheme_step, "abc", ambiguous_width=3)
        self.assertRaises(ValueError, textseg.grapheme_step, "abc", ambiguous_width=True)
        self.assertEqual(textseg.grapheme_step("±").width, 1)
        self.assertEqual(textseg.grapheme_step("±", ambiguous_width=2).width, 2)

        res = textseg.word_step("Hello, world")
        self.assertEqual((res.segment, res.remainder, res.width), ("Hello", ", world", None))
        res = textseg.sentence_step("One. Two.")
        self.assertEqual((res.segment, res.remainder), ("One. ", "Two."))

        # the ZWJ flag is part of word states
        res = textseg.word_step("a\u200d")
        self.assertEqual(res.segment, "a\u200d")
        self.assertEqual(textseg.word_step("😀", res.state).segment, "😀")

    def testIncremental(self):
        "Undecided segments are held back until more text arrives"
        res = textseg.grapheme_step("e", final=False)
        self.assertEqual(res, Step("", "e", 0, START))
        res = textseg.grapheme_step("e\u0301x", final=False)
        self.assertEqual((res.segment, res.remainder), ("e\u0301", "x"))
        res2 = textseg.grapheme_step(res.remainder, res.state, final=False)
        self.assertEqual(res2, Step("", "x", 0, res.state))
        res2 = textseg.grapheme_step(res.remainder + "\u0301", res.state, final=True)
        self.assertEqual((res2.segment, res2.remainder), ("x\u0301", ""))

        # word lookahead needs to see past the apostrophe
        res = textseg.word_step("can'", final=False)
        self.assertEqual(res.segment, "")
        res = textseg.word_step("can't ", final=False)
        self.assertEqual(res.segment, "can't")

        # sentence lookahead for a lower case continuation
        res = textseg.sentence_step("Hello. ", final=False)
        self.assertEqual(res.segment, "")
        res = textseg.sentence_step("Hello. world", final=False)
        self.assertEqual(res.segment, "")
        res = textseg.sentence_step("Hello. World", final=False)
        self.assertEqual((res.segment, res.remainder), ("Hello. ", "World"))

        # incomplete utf8
        res = textseg.grapheme_step(b"a\xcc", final=False)
        self.assertEqual(res, Step(b"", b"a\xcc", 0, START))
        res = textseg.grapheme_step(b"a\xcc\x81b", final=False)
        self.assertEqual((res.segment, res.remainder, res.width), (b"a\xcc\x81", b"b", 1))
        res = textseg.grapheme_step(b"a\xcc", final=True)
        self.assertEqual((res.segment, res.remainder), (b"a", b"\xcc"))

        with self.assertLogs("textseg._engine", level="DEBUG") as logs:
            textseg.sentence_step("Hello", final=False)
        self.assertIn("undecided boundary", logs.output[0])

    def feed(self, meth, text, chunk_size, **kwargs):
        segments = []
        state = START
        pending = text[:0]
        for i in range(0, len(text), chunk_size):
            pending += text[i : i + chunk_size]
            while pending:
                res = meth(pending, state, final=False, **kwargs)
                if not res.segment:
                    self.assertEqual(res.remainder, pending)
                    self.assertEqual(res.state, state)
                    break
                segments.append(res.segment)
                pending, state = res.remainder, res.state
        while pending:
            res = meth(pending, state, final=True, **kwargs)
            self.assertTrue(res.segment)
            segments.append(res.segment)
            pending, state = res.remainder, res.state
        return segments

    sample_texts = (
        "Hello world. This is a test! Isn't it? Mr. Smith went to the U.S.A. yesterday.",
        "What?! No way... Really?",
        "e\u0301té café 👩\u200d❤\ufe0f\u200d👩 🇩🇪🇫🇷 👍🏽 ok",
        "नमस\u094dत\u0947 द\u0941न\u093fय\u093e। 世界 こんにちは カタカナ 3.14 1,000 foo_bar",
        "line one\r\nline two\nline three\u2029Next para.",
        "\u0001\u0002 \t tabs and\u00a0nbsp, 'quotes' \"double\" (brackets).",
    )

    def testChunkDeterminism(self):
        "Feeding text in chunks gives the same segments as all at once"
        for text in self.sample_texts:
            for name in "grapheme", "word", "sentence":
                meth = getattr(textseg, f"{ name }_step")
                expected = list(getattr(textseg, f"{ name }_iter")(text))
                for chunk_size in 1, 2, 3, 7, len(text):
                    self.assertEqual(self.feed(meth, text, chunk_size), expected, f"{name} {chunk_size} {text!r}")
                encoded = text.encode("utf8")
                for chunk_size in 1, 5:
                    self.assertEqual(
                        self.feed(meth, encoded, chunk_size),
                        [s.encode("utf8") for s in expected],
                        f"{name} bytes {chunk_size} {text!r}",
                    )

    def testProperties(self):
        "Round trips and counting relationships"
        rand = random.Random(7)
        text = "".join(self.sample_texts)
        texts = list(self.sample_texts) + ["".join(rand.sample(text, len(text))) for _ in range(5)]
        for text in texts:
            for name in "grapheme", "word", "sentence":
                self.assertEqual("".join(getattr(textseg, f"{ name }_iter")(text)), text)
            self.assertLessEqual(textseg.grapheme_count(text), len(text))
            self.assertLessEqual(len(text), len(text.encode("utf8")))
            self.assertGreater(textseg.grapheme_count(text), 0)
            self.assertGreaterEqual(textseg.text_width(text, ambiguous_width=2), textseg.text_width(text))

        ascii = "".join(chr(c) for c in range(0x20, 0x7F))
        self.assertEqual(textseg.text_width(ascii), len(ascii))
        self.assertEqual(textseg.grapheme_count(ascii), len(ascii))

    def testMalformed(self):
        "Invalid UTF-8 is segmented byte by byte and round trips"
        data = b"ab\xff\xfecd\xe2\x82"
        self.assertEqual(textseg.grapheme_count(data), 8)
        segments = []
        rest, state = data, START
        while rest:
            res = textseg.grapheme_step(rest, state)
            segments.append(res.segment)
            rest, state = res.remainder, res.state
        self.assertEqual(b"".join(segments), data)
        self.assertIn(b"\xff", segments)
        for meth in textseg.word_step, textseg.sentence_step:
            res = meth(data)
            self.assertEqual(res.segment + res.remainder, data)
        self.assertEqual(textseg.reverse(b"ab\xff"), b"\xffba")

    def testWidth(self):
        "Display width"
        for text, width, wide in (
            ("a", 1, 1),
            ("\t", 0, 0),
            ("\r\n", 0, 0),
            ("e\u0301", 1, 1),
            ("±", 1, 2),
            ("世界", 4, 4),
            ("🇩🇪", 2, 2),
            ("🇩", 2, 2),
            ("☺\ufe0f", 2, 2),
            ("⌚", 2, 2),
            ("⌚\ufe0e", 1, 1),
            ("👍🏽", 2, 2),
            ("👨\u200d💻", 2, 2),
            ("ｶﾞ", 2, 2),
            ("가", 2, 2),
            ("⸺", 3, 3),
            ("⸻", 4, 4),
            ("\u200b", 0, 0),
            ("a\ufe0f", 1, 1),
            ("1\ufe0f\u20e3", 1, 1),
            ("", 0, 0),
        ):
            self.assertEqual(textseg.text_width(text), width, f"{text!r}")
            self.assertEqual(textseg.text_width(text, ambiguous_width=2), wide, f"{text!r}")

        self.assertIs(textseg.width, textseg.text_width)
        self.assertRaises(TypeError, textseg.text_width, 3)
        self.assertRaises(ValueError, textseg.text_width, "abc", ambiguous_width=0)

        for cluster, width in (("a", 1), ("e\u0301", 1), ("🇩🇪", 2), ("\u0301", 0), ("\x7f", 0)):
            self.assertEqual(textseg.cluster_width(cluster), width, f"{cluster!r}")

        for codepoint, width in (
            (0, 0),
            (0x7F, 0),
            (0x9F, 0),
            ("a", 1),
            (0x4E16, 2),
            ("\u0301", 0),
            (0x200D, 0),
            (0xFF9E, 1),
            (0xFF21, 2),
            (0x1160, 0),
            (0x11A8, 0),
            (0xAD, 0),
        ):
            self.assertEqual(textseg.codepoint_width(codepoint), width, f"{codepoint!r}")
        self.assertEqual(textseg.codepoint_width(0xB1, ambiguous_width=2), 2)
        self.assertRaises(TypeError, textseg.codepoint_width, 1.0)
        self.assertRaises(TypeError, textseg.codepoint_width, b"a")
        self.assertRaises(ValueError, textseg.codepoint_width, -1)
        self.assertRaises(ValueError, textseg.codepoint_width, sys.maxunicode + 1)
        self.assertRaises(ValueError, textseg.codepoint_width, "ab")
        self.assertRaises(ValueError, textseg.codepoint_width, "a", ambiguous_width=3)

        self.assertEqual(textseg.text_width_substr("世界abc", 3), (2, "世"))
        self.assertEqual(textseg.text_width_substr("世界abc", 4), (4, "世界"))
        self.assertEqual(textseg.text_width_substr("abc", 10), (3, "abc"))
        self.assertEqual(textseg.text_width_substr("e\u0301e\u0301", 1), (1, "e\u0301"))
        self.assertEqual(textseg.text_width_substr("±x", 1, ambiguous_width=2), (0, ""))
        self.assertRaises(ValueError, textseg.text_width_substr, "abc", 0)
        self.assertRaises(ValueError, textseg.text_width_substr, "abc", 1, ambiguous_width=3)

    def testGraphemeHelpers(self):
        "Grapheme aware string operations"
        text = "e\u0301abc"
        self.assertEqual(textseg.grapheme_substr(text, 0, 1), "e\u0301")
        self.assertEqual(textseg.grapheme_substr(text, -1), "c")
        self.assertEqual(textseg.grapheme_substr(text, -3, -3 + 1), "a")
        self.assertEqual(textseg.grapheme_substr(text, 10, 20), "")
        self.assertEqual(textseg.grapheme_substr(text), text)

        self.assertTrue(textseg.grapheme_startswith("e\u0301x", ""))
        self.assertFalse(textseg.grapheme_startswith("e\u0301x", "e"))
        self.assertTrue(textseg.grapheme_startswith("e\u0301x", "e\u0301"))
        self.assertTrue(textseg.grapheme_startswith("e\u0301x", "e\u0301x"))
        self.assertFalse(textseg.grapheme_startswith("e\u0301x", "x"))

        self.assertTrue(textseg.grapheme_endswith("xe\u0301", ""))
        self.assertFalse(textseg.grapheme_endswith("xe\u0301", "\u0301"))
        self.assertTrue(textseg.grapheme_endswith("xe\u0301", "e\u0301"))
        self.assertTrue(textseg.grapheme_endswith("xe\u0301", "xe\u0301"))
        self.assertFalse(textseg.grapheme_endswith("xe\u0301", "x"))

        text = "ae\u0301e"
        self.assertEqual(textseg.grapheme_find(text, "e"), 3)
        self.assertEqual(textseg.grapheme_find(text, "e\u0301"), 1)
        self.assertEqual(textseg.grapheme_find(text, "e", 0, 3), -1)
        self.assertEqual(textseg.grapheme_find(text, ""), -1)
        self.assertEqual(textseg.grapheme_find(text, "z"), -1)
        self.assertRaises(ValueError, textseg.grapheme_find, text, "e", 10)
        self.assertRaises(TypeError, textseg.grapheme_find, text, b"e")

        self.assertEqual(textseg.reverse("ae\u0301"), "e\u0301a")
        self.assertEqual(textseg.reverse("🇩🇪🇫🇷"), "🇫🇷🇩🇪")
        self.assertEqual(textseg.reverse(""), "")
        self.assertEqual(textseg.reverse(b"ab"), b"ba")
        self.assertRaises(TypeError, textseg.reverse, 3)

    def testPropertyLookup(self):
        "Codepoint property lookups"
        meth = textseg.category
        self.assertRaises(TypeError, meth, b"aaa")
        self.assertRaises(TypeError, meth)
        self.assertRaises(TypeError, meth, 1.0)
        self.assertRaises(ValueError, meth, -1)
        self.assertRaises(ValueError, meth, sys.maxsize)
        self.assertRaises(ValueError, meth, sys.maxunicode + 1)
        self.assertRaises(ValueError, meth, "avbc")

        self.assertEqual("Cc", meth(0))
        self.assertEqual("Cn", meth(sys.maxunicode))
        self.assertEqual("Ll", meth("a"))
        self.assertEqual("Lu", meth(ord("A")))

        self.assertEqual(textseg.east_asian_width("世"), "W")
        self.assertEqual(textseg.east_asian_width("a"), "Na")
        self.assertEqual(textseg.east_asian_width(0xB1), "A")

        self.assertEqual(textseg.category_name("grapheme", "a"), ("Other",))
        self.assertEqual(textseg.category_name("grapheme", "\r"), ("CR",))
        self.assertEqual(textseg.category_name("grapheme", 0x200D), ("ZWJ",))
        self.assertEqual(textseg.category_name("grapheme", 0x1F1E6), ("Regional_Indicator",))
        self.assertEqual(textseg.category_name("grapheme", 0x094D), ("InCB_Linker",))
        self.assertEqual(textseg.category_name("grapheme", 0x0915), ("InCB_Consonant",))
        self.assertEqual(textseg.category_name("grapheme", 0x0301), ("InCB_Extend",))
        self.assertEqual(textseg.category_name("grapheme", 0xAC00), ("LV",))
        self.assertEqual(textseg.category_name("grapheme", 0xAC01), ("LVT",))
        self.assertEqual(textseg.category_name("grapheme", 0x1F600), ("Extended_Pictographic",))
        self.assertEqual(textseg.category_name("word", "a"), ("ALetter",))
        self.assertEqual(textseg.category_name("word", "'"), ("Single_Quote",))
        self.assertEqual(textseg.category_name("word", "."), ("MidNumLet",))
        self.assertEqual(textseg.category_name("word", "_"), ("ExtendNumLet",))
        self.assertEqual(textseg.category_name("word", "カ"), ("Katakana",))
        self.assertEqual(textseg.category_name("word", "א"), ("Hebrew_Letter",))
        self.assertEqual(textseg.category_name("word", "あ"), ("Other",))
        self.assertEqual(textseg.category_name("word", " "), ("WSegSpace",))
        self.assertEqual(textseg.category_name("sentence", "."), ("ATerm",))
        self.assertEqual(textseg.category_name("sentence", "!"), ("STerm",))
        self.assertEqual(textseg.category_name("sentence", "a"), ("Lower",))
        self.assertEqual(textseg.category_name("sentence", "A"), ("Upper",))
        self.assertEqual(textseg.category_name("sentence", ","), ("SContinue",))
        self.assertEqual(textseg.category_name("sentence", ")"), ("Close",))
        self.assertEqual(textseg.category_name("sentence", "\u2029"), ("Sep",))
        # format characters that are digits or letters for words
        for codepoint in 0x0600, 0x0605, 0x06DD, 0x08E2, 0x110BD, 0x110CD, 0x19DA:
            self.assertEqual(textseg.category_name("word", codepoint), ("Numeric",), f"{codepoint:04X}")
        self.assertEqual(textseg.category_name("word", 0x070F), ("ALetter",))
        self.assertEqual(textseg.category_name("word", 0x200B), ("Other",))
        self.assertEqual(textseg.category_name("sentence", 0x19DA), ("Numeric",))
        self.assertEqual(textseg.category_name("sentence", 0x200B), ("Format",))
        self.assertEqual(textseg.category_name("sentence", 0x0600), ("Format",))
        # emoji modifiers extend graphemes and words but not sentences
        for codepoint in range(0x1F3FB, 0x1F400):
            self.assertEqual(textseg.category_name("grapheme", codepoint), ("Extend",))
            self.assertEqual(textseg.category_name("word", codepoint), ("Extend",))
            self.assertEqual(textseg.category_name("sentence", codepoint), ("Other",))
        self.assertRaises(ValueError, textseg.category_name, "line_break", "a")
        self.assertRaises(ValueError, textseg.category_name, "word", -1)

        self.assertTrue(textseg.is_extended_pictographic("abc😀"))
        self.assertFalse(textseg.is_extended_pictographic("abc"))
        self.assertTrue(textseg.is_regional_indicator("🇩"))
        self.assertFalse(textseg.is_regional_indicator("D"))

        self.assertRegex(textseg.unicode_version, r"^\d+\.\d+$")

        # every codepoint has exactly one class of each kind
        for name, klass in (("grapheme", textseg._ucd.GC), ("word", textseg._ucd.WC), ("sentence", textseg._ucd.SC)):
            lookup = getattr(textseg._ucd, f"{ name }_class")
            for codepoint in itertools.chain(range(0, 0x3000), range(0x1F000, 0x1F700), (sys.maxunicode,)):
                self.assertEqual(len(textseg.category_name(name, codepoint)), 1, f"{ name } {codepoint:04X}")
            self.assertEqual(lookup(0x41), lookup(0x41))
            self.assertGreater(lookup.cache_info().hits + lookup.cache_info().misses, 0)

    def testRangeTable(self):
        table = textseg._ucd.RangeTable(((0x10, 0x20), (0x30, 0x30), (0x100, 0x1FF)))
        for codepoint in 0x10, 0x15, 0x20, 0x30, 0x100, 0x1FF:
            self.assertIn(codepoint, table)
        for codepoint in 0, 0xF, 0x21, 0x2F, 0x31, 0xFF, 0x200, sys.maxunicode:
            self.assertNotIn(codepoint, table)
        self.assertEqual(len(table), 17 + 1 + 256)
        self.assertNotIn(5, textseg._ucd.RangeTable(()))

        values = textseg._ucd.RangeMap(((0x10, 0x20, "A"), (0x21, 0x21, "B"), (0x100, 0x1FF, "A")), "Z")
        for codepoint, value in (
            (0, "Z"),
            (0xF, "Z"),
            (0x10, "A"),
            (0x20, "A"),
            (0x21, "B"),
            (0x22, "Z"),
            (0x1FF, "A"),
            (0x200, "Z"),
            (sys.maxunicode, "Z"),
        ):
            self.assertEqual(values[codepoint], value, f"{codepoint:04X}")
        self.assertEqual(textseg._ucd.RangeMap((), "Other")[0x41], "Other")

    def testShippedTables(self):
        "Generated tables are sorted, disjoint and only hold known values"
        known = {
            "GRAPHEME_BREAK": set(vars(textseg._ucd.GC)),
            "WORD_BREAK": set(vars(textseg._ucd.WC)),
            "SENTENCE_BREAK": set(vars(textseg._ucd.SC)),
            "GENERAL_CATEGORY": {
                "Lu", "Ll", "Lt", "Lm", "Lo", "Mn", "Mc", "Me", "Nd", "Nl", "No", "Pc", "Pd", "Ps", "Pe", "Pi",
                "Pf", "Po", "Sm", "Sc", "Sk", "So", "Zs", "Zl", "Zp", "Cc", "Cf", "Cs", "Co",
            },
            "EAST_ASIAN_WIDTH": {"A", "F", "H", "Na", "W"},
        }
        for name, values in known.items():
            table = getattr(textseg._tables, name)
            self.assertTrue(table, name)
            previous = -1
            for start, end, value in table:
                self.assertGreater(start, previous, f"{ name } {start:04X}")
                self.assertLessEqual(start, end)
                self.assertLessEqual(end, sys.maxunicode)
                self.assertIn(value, values, f"{ name } {start:04X}")
                previous = end

        previous = -1
        for start, end in textseg._tables.EXTENDED_PICTOGRAPHIC:
            self.assertGreater(start, previous)
            self.assertLessEqual(start, end)
            previous = end

        # syllables are computed
        for start, end, value in textseg._tables.GRAPHEME_BREAK:
            self.assertFalse(start <= 0xD7A3 and end >= 0xAC00, f"{start:04X}")

    def testRecentCodepoints(self):
        "Properties of codepoints assigned after Unicode 14 come from the shipped tables"
        if tuple(map(int, textseg.unicode_version.split("."))) < (15, 1):
            self.skipTest("tables are older than Unicode 15.1")

        # Kannada sign combining anusvara above right (15.0)
        self.assertEqual(textseg.category(0x0CF3), "Mc")
        self.assertEqual(textseg.category_name("grapheme", 0x0CF3), ("SpacingMark",))
        self.assertEqual(textseg.grapheme_count("\u0c95\u0cf3"), 1)
        # Kawi digit zero (15.0)
        self.assertEqual(textseg.category(0x11F50), "Nd")
        self.assertEqual(textseg.category_name("word", 0x11F50), ("Numeric",))
        self.assertEqual(textseg.word_count("\U00011f50\U00011f51"), 1)
        # CJK Extension H (15.0) and I (15.1)
        self.assertEqual(textseg.category(0x31350), "Lo")
        self.assertEqual(textseg.east_asian_width(0x31350), "W")
        self.assertEqual(textseg.category(0x2EBF0), "Lo")
        self.assertEqual(textseg.text_width("\U0002ebf0"), 2)
        # shaking face (15.0)
        self.assertTrue(textseg.is_extended_pictographic("\U0001fae8"))
        self.assertEqual(textseg.text_width("\U0001fae8"), 2)
        # ideographic description characters (15.1)
        self.assertEqual(textseg.east_asian_width(0x2FFC), "W")
        self.assertEqual(textseg.codepoint_width(0x31EF), 2)
        # unassigned
        self.assertEqual(textseg.category(0x0CF4), "Cn")
        # defaults for unassigned codepoints by block
        self.assertEqual(textseg.east_asian_width(0x3FFFD), "W")
        self.assertEqual(textseg.east_asian_width(0x10FFFF), "N")

    def testResolve(self):
        "Rule table lookup precedence"
        ANY = textseg._engine.ANY
        table = {
            (1, 2): (10, False, 50),
            (1, ANY): (11, True, 40),
            (ANY, 4): (12, False, 60),
            (3, ANY): (13, False, 90),
        }
        default = (0, True, 9990)
        resolve = textseg._engine.resolve
        # exact wins
        self.assertEqual(resolve(table, 1, 2, default), (10, False, 50))
        # state from class entry, boundary from the lower rule
        self.assertEqual(resolve(table, 1, 4, default), (12, True, 40))
        self.assertEqual(resolve(table, 3, 4, default), (12, False, 60))
        self.assertEqual(resolve(table, 1, 8, default), (11, True, 40))
        self.assertEqual(resolve(table, 5, 4, default), (12, False, 60))
        self.assertEqual(resolve(table, 5, 8, default), default)

    def testRuleTables(self):
        "Rule tables only reference known states"
        for module in textseg.grapheme, textseg.word, textseg.sentence:
            for (state, cls), (new_state, boundary, rule) in module._rules.items():
                self.assertIn(state, module._valid_states)
                self.assertIn(new_state, module._valid_states)
                self.assertIsInstance(boundary, bool)
                self.assertGreater(rule, 0)
                self.assertFalse(cls & (cls - 1), "classes are single bits")

    def testBreakTestFile(self):
        "Parsing and running Unicode break test lines"
        import textseg.__main__ as cli

        parse = cli.parse_break_test_line
        self.assertEqual(
            parse("÷ 0061 × 0301 ÷ 0062 ÷\t#  ÷ [0.2] LATIN SMALL LETTER A (Other)"), ("a\u0301b", [2, 3])
        )
        self.assertEqual(parse("÷ 000D × 000A ÷"), ("\r\n", [2]))
        self.assertEqual(parse("÷ 1F1E6 ÷"), ("\U0001f1e6", [1]))
        self.assertIsNone(parse(""))
        self.assertIsNone(parse("  \n"))
        self.assertIsNone(parse("# GraphemeBreakTest-15.1.0.txt"))
        self.assertRaises(ValueError, parse, "0061 ÷")
        self.assertRaises(ValueError, parse, "÷ 0061 ×")
        self.assertRaises(ValueError, parse, "÷ zz ÷")

        self.assertEqual(cli.find_breaks("", textseg.grapheme_next_break), [])
        self.assertEqual(cli.find_breaks("ae\u0301x", textseg.grapheme_next_break), [1, 3, 4])

        lines = ["# comment\n", "÷ 0061 ÷ 0062 ÷\n", "÷ 0061 × 0062 ÷\n", "\n", "÷ 0065 ÷ 0301 ÷\n"]
        passed, failures = cli.run_break_test(lines, textseg.grapheme_next_break)
        self.assertEqual(passed, 1)
        self.assertEqual([f.line_num for f in failures], [3, 5])
        self.assertEqual(failures[0].text, "ab")
        self.assertEqual(failures[0].expected, [2])
        self.assertEqual(failures[0].seen, [1, 2])
        self.assertEqual(failures[1].line, "÷ 0065 ÷ 0301 ÷")

        passed, failures = cli.run_break_test(lines, textseg.grapheme_next_break, fail_fast=True)
        self.assertEqual((passed, len(failures)), (1, 1))

        shown = []
        cli.run_break_test(lines[:2], textseg.grapheme_next_break, show=lambda n, line: shown.append(n))
        self.assertEqual(shown, [1, 2])

        with self.assertRaisesRegex(ValueError, "Line 2 "):
            cli.run_break_test(["÷ 0061 ÷\n", "0061 ÷\n"], textseg.grapheme_next_break)

        self.assertEqual(cli.describe_difference([1, 2, 3], [1, 2, 3]), [])
        self.assertEqual(cli.describe_difference([1, 2, 3], [1, 3]), ["       seen delete [2]"])

    def testCLI(self):
        "Exercise command line interface"
        text = "Hello, wörld! e\u0301 👩\u200d👩 🇩🇪 世界. Mr. Smith went home."

        with tempfile.TemporaryDirectory(prefix="textsegtest") as tmpdir:
            textfile = pathlib.Path(tmpdir) / "text.txt"
            textfile.write_text(text * 3, encoding="utf8")

            for kind in "grapheme", "word", "sentence":
                proc = self.exec("show", "--text-file", str(textfile), kind)
                if proc.returncode != 0:
                    print(proc.stdout.decode(), file=sys.stderr)
                    print(proc.stderr.decode(), file=sys.stderr)
                self.assertEqual(proc.returncode, 0, f"Failed {proc=}")

                proc = self.exec("-cc", "show", "--untailored", kind, text)
                self.assertEqual(proc.returncode, 0, f"Failed {proc=}")

            proc = self.exec("show", "word")
            self.assertNotEqual(proc.returncode, 0)

            proc = self.exec("--verbose", "show", "sentence", "One. Two.")
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertIn(b"#1 ", proc.stdout)

            proc = self.exec("codepoint", "41", "1F600", "é")
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertIn(b"LATIN CAPITAL LETTER A", proc.stdout)
            self.assertIn(b"Extended_Pictographic", proc.stdout)

            proc = self.exec("codepoint", "110000")
            self.assertNotEqual(proc.returncode, 0)

            proc = self.exec("width", "世界", "abc")
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertEqual(proc.stdout.decode("utf8").split("\n")[0].split("\t")[0], "4")

            proc = self.exec("width", "--ambiguous-wide", "±")
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertTrue(proc.stdout.startswith(b"2\t"))

            testfile = pathlib.Path(tmpdir) / "GraphemeBreakTest.txt"
            testfile.write_text(
                "# GraphemeBreakTest-test.txt\n"
                "\n"
                "÷ 0061 ÷ 0062 ÷\t#  comment\n"
                "÷ 0065 × 0301 ÷ 0078 ÷\n"
                "÷ 000D × 000A ÷ 0061 ÷\n"
                "÷ 1F1E6 × 1F1E7 ÷ 1F1E8 ÷\n",
                encoding="utf8",
            )
            proc = self.exec("breaktest", "grapheme", str(testfile))
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertIn(b"4 passed", proc.stdout)

            testfile.write_text("÷ 0061 × 0062 ÷\n÷ 0065 ÷ 0301 ÷\n", encoding="utf8")
            proc = self.exec("breaktest", "grapheme", str(testfile))
            self.assertEqual(proc.returncode, 2, f"Failed {proc=}")
            self.assertIn(b"2 tests failed", proc.stderr)

            # word and sentence test files are for the untailored rules
            testfile.write_text("÷ 0061 ÷ 002D ÷ 0062 ÷\n", encoding="utf8")
            proc = self.exec("breaktest", "word", str(testfile))
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            testfile.write_text(
                "÷ 004D × 0072 × 002E × 0020 ÷ 0053 × 006D × 0069 × 0074 × 0068 × 002E ÷\n", encoding="utf8"
            )
            proc = self.exec("breaktest", "-v", "sentence", str(testfile))
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertRegex(proc.stdout, rb"1: .* 004D ")
            self.assertIn(b"1 passed", proc.stdout)

            testfile.write_text("÷ 0061 ÷\n0061 ÷ 0062 ÷\n", encoding="utf8")
            proc = self.exec("breaktest", "grapheme", str(testfile))
            self.assertEqual(proc.returncode, 1, f"Failed {proc=}")
            self.assertIn(b"Line 2", proc.stderr)

            proc = self.exec("benchmark", "--size", "0.01", str(textfile))
            self.assertEqual(proc.returncode, 0, f"Failed {proc=}")
            self.assertIn(b"codepoints per second", proc.stdout)

            if coverage_run:
                proc = self.exec("benchmark", "--size", "0.01", "--others", "all", str(textfile))
                self.assertEqual(proc.returncode, 0, f"Failed {proc=}")


class Generator(unittest.TestCase):
    "Range table generation tool"

    def setUp(self):
        import importlib.util

        location = pathlib.Path(__file__).parent.parent / "tools" / "ucdprops2code.py"
        if not location.exists():
            self.skipTest("tools directory not present")
        found = importlib.util.spec_from_file_location("ucdprops2code", location)
        self.tool = importlib.util.module_from_spec(found)
        found.loader.exec_module(self.tool)

    def testRanges(self):
        self.assertEqual(self.tool.to_ranges([]), [])
        self.assertEqual(self.tool.to_ranges([5, 1, 2, 3, 7, 8]), [(1, 3), (5, 5), (7, 8)])

    def testParse(self):
        source = "# Test-15.1.0.txt\n\n0041..005A    ; Upper # Lu  [26] LATIN\n00AA          ; Lower # Lo\n"
        self.assertEqual(
            list(self.tool.parse_source_lines(source)), [(0x41, 0x5A, "Upper"), (0xAA, 0xAA, "Lower")]
        )
        dest = {}
        self.tool.populate(source, dest)
        self.assertEqual(dest["Lower"], {0xAA})
        self.assertEqual(len(dest["Upper"]), 26)

    def testValueRanges(self):
        self.assertEqual(self.tool.to_value_ranges({}), [])
        self.assertEqual(
            self.tool.to_value_ranges({3: "A", 1: "A", 2: "A", 4: "B", 6: "B", 7: "A"}),
            [(1, 3, "A"), (4, 4, "B"), (6, 6, "B"), (7, 7, "A")],
        )
        self.assertEqual(
            self.tool.by_codepoint({"Other": {1, 2}, "Upper": {3, 4}, "Lower": {5}}, "Other"),
            {3: "Upper", 4: "Upper", 5: "Lower"},
        )

    def testWidthDefaults(self):
        source = (
            "# EastAsianWidth-15.1.0.txt\n"
            "# @missing: 0000..4FFF; N\n"
            "# @missing: 3400..4DBF; W\n"
            "0041..0043;Na     # Lu     [3] LATIN CAPITAL LETTER A..C\n"
            "3400;W            # Lo         CJK UNIFIED IDEOGRAPH-3400\n"
            "3401;A            # Lo         not real data\n"
        )
        self.assertEqual(list(self.tool.parse_missing_lines(source)), [(0, 0x4FFF, "N"), (0x3400, 0x4DBF, "W")])
        self.tool.east_asian_widths.clear()
        self.tool.populate_width(source)
        widths = self.tool.east_asian_widths
        self.assertEqual(widths[0x40], "N")
        self.assertEqual(widths[0x41], "Na")
        self.assertEqual(widths[0x3400], "W")
        self.assertEqual(widths[0x3401], "A")
        self.assertEqual(widths[0x3402], "W")
        self.assertEqual(widths[0x4FFF], "N")
        self.assertNotIn(0x5000, widths)
        widths.clear()

    def testGenerateTable(self):
        self.assertEqual(
            self.tool.generate_table("VALUES", "", {1: "X", 2: "X", 3: "X", 0x1F600: "Yy"}),
            ["VALUES = (", '    (0x0001, 0x0003, "X"), (0x1F600, 0x1F600, "Yy"),', ")", ""],
        )
        self.assertEqual(self.tool.generate_table("EMPTY", "nothing", set()), ["# nothing", "EMPTY = (", ")", ""])

        lines = self.tool.pack([f"({ self.tool.fmt(i) }, { self.tool.fmt(i) })," for i in range(50)])
        self.assertGreater(len(lines), 1)
        for line in lines:
            self.assertTrue(line.startswith("    ("))
            self.assertLessEqual(len(line), 100)
        self.assertEqual(self.tool.pack([]), [])

    def testUpdateSection(self):
        self.tool.ucd_version = "99.0"
        self.tool.get_tables = lambda: [("TEST_TABLE", "testing", {1, 2, 3, 10})]
        source = "before\n### BEGIN UNICODE UPDATE SECTION ###\nold\n### END UNICODE UPDATE SECTION ###\nafter\n"
        result = self.tool.update_section(source)
        self.assertNotIn("old", result)
        self.assertIn('unicode_version = "99.0"', result)
        self.assertIn("TEST_TABLE = (\n    (0x0001, 0x0003), (0x000A, 0x000A),\n)", result)
        self.assertTrue(result.startswith("before\n"))
        self.assertTrue(result.endswith("after\n"))

        # the shipped tables parse as the generator writes them
        tables = pathlib.Path(textseg._tables.__file__).read_text(encoding="utf8")
        self.assertIn("### BEGIN UNICODE UPDATE SECTION ###", tables)
        self.assertIn("### END UNICODE UPDATE SECTION ###", tables)


def extended_testing_file(name: str) -> typing.Union[pathlib.Path, None]:
    "Returns path if found"

    # bigger data files used for testing are not shipped with textseg or
    # part of the repository but will be used for testing if present.
    # They must be in a directory named textseg-extended-testing
    # alongside the textseg source directory.  python3 setup.py fetch
    # downloads them.

    # this is for documentation purposes
    sources = {
        "UCD.zip": {
            "description": "Unicode codes databases",
            "url": "https://www.unicode.org/Public/UCD/latest/ucd/UCD.zip",
        },
    }

    if name not in sources:
        # make it a fatal error to give an unknown name
        sys.exit(f"unknown source { name= }")

    location = pathlib.Path(__file__).parent.parent.parent / "textseg-extended-testing" / name

    return location if location.exists() else None


if __name__ == "__main__":
    unittest.main()
