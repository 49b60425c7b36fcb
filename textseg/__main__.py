from __future__ import annotations

import argparse
import atexit
import difflib
import functools
import logging
import sys
import unicodedata

from typing import Any, Callable, Iterable, NamedTuple

import textseg

from textseg import _ucd

log = logging.getLogger("textseg")


def codepoint_name(codepoint: int) -> str:
    try:
        return unicodedata.name(chr(codepoint))
    except ValueError:
        return f"<{ textseg.category(codepoint) }>"


class BreakTestFailure(NamedTuple):
    "A line of a break test file that gave different boundaries"

    line_num: int
    line: str
    text: str
    expected: list[int]
    seen: list[int]


def parse_break_test_line(line: str) -> tuple[str, list[int]] | None:
    """Parses a line of a Unicode break test file such as ``÷ 0061 × 0301 ÷``

    :returns: The text and the offsets of the boundaries in it, or None
        for blank and comment lines
    :raises ValueError: If the line is not well formed
    """
    fields = line.split("#", 1)[0].split()
    if not fields:
        return None
    if fields[0] != "÷" or fields[-1] != "÷":
        raise ValueError("doesn't start and end with ÷")
    text = ""
    breaks: list[int] = []
    for field in fields[1:]:
        if field == "÷":
            breaks.append(len(text))
        elif field != "×":
            text += chr(int(field, 16))
    return text, breaks


def find_breaks(text: str, next_break: Callable[[str, int], int]) -> list[int]:
    "Offsets of every boundary after the start of text"
    offset = 0
    breaks: list[int] = []
    while offset < len(text):
        offset = next_break(text, offset)
        breaks.append(offset)
    return breaks


def run_break_test(
    lines: Iterable[str],
    next_break: Callable[[str, int], int],
    *,
    fail_fast: bool = False,
    show: Callable[[int, str], Any] | None = None,
) -> tuple[int, list[BreakTestFailure]]:
    """Checks each test line against ``next_break``

    :param show: Called with the line number and line before each line is tested
    :returns: How many lines passed, and the failures
    :raises ValueError: For a malformed line, with the line number in the message
    """
    passed = 0
    failures: list[BreakTestFailure] = []
    for line_num, line in enumerate(lines, 1):
        if show:
            show(line_num, line)
        try:
            parsed = parse_break_test_line(line)
        except ValueError as exc:
            raise ValueError(f"Line { line_num } { exc }") from None
        if parsed is None:
            continue
        log.debug("line %d: %s", line_num, line.rstrip())
        text, expected = parsed
        seen = find_breaks(text, next_break)
        if seen == expected:
            passed += 1
            continue
        failures.append(BreakTestFailure(line_num, line.strip(), text, expected, seen))
        if fail_fast:
            break
    return passed, failures


def describe_difference(seen: list[int], expected: list[int]) -> list[str]:
    "Only the differing parts of long boundary lists"
    res = []
    for tag, a1, a2, b1, b2 in difflib.SequenceMatcher(a=seen, b=expected).get_opcodes():
        if tag == "equal":
            continue
        if a1 != a2:
            res.append(f"       seen {tag} {seen[a1:a2]}")
        if b1 != b2:
            res.append(f"    expected {tag} {expected[b1:b2]}")
    return res


def main(argv: list[str] | None = None) -> None:
    # We output text non unicode compatible can't handle
    sys.stdout.reconfigure(errors="replace")  # type: ignore[union-attr]

    parser = argparse.ArgumentParser(prog="python3 -m textseg", description="Unicode text segmentation and width")
    parser.add_argument(
        "--verbose", default=False, action="store_true", help="Log debug information about segmentation"
    )
    parser.add_argument(
        "-cc",
        "--compact-codepoints",
        dest="compact_codepoints",
        action="store_true",
        default=False,
        help="Only show hex codepoint values, not full details",
    )

    subparsers = parser.add_subparsers(required=True)
    p = subparsers.add_parser("breaktest", help="Run Unicode test file")
    p.set_defaults(function="breaktest")
    p.add_argument("-v", default=False, action="store_true", dest="show_lines", help="Show each line as it is tested")
    p.add_argument("--fail-fast", default=False, action="store_true", help="Exit on first test failure")
    p.add_argument("test", choices=("grapheme", "word", "sentence"), help="What to test")
    p.add_argument(
        "file",
        help="break test text file.  They can be downloaded from https://www.unicode.org/Public/UCD/latest/ucd/auxiliary/",
        type=argparse.FileType("rt", encoding="utf8"),
    )

    p = subparsers.add_parser("show", help="Run against provided text")
    p.set_defaults(function="show")
    p.add_argument("show", choices=("grapheme", "word", "sentence"), help="What to show")
    p.add_argument("--text-file", type=argparse.FileType("rt", encoding="utf8"))
    p.add_argument(
        "--untailored",
        default=False,
        action="store_true",
        help="For word and sentence use the plain Unicode rules [%(default)s]",
    )
    p.add_argument("text", nargs="*", help="Text to segment unless --text-file used")

    p = subparsers.add_parser("codepoint", help="Show information about codepoints")
    p.add_argument("text", nargs="+", help="If a hex constant then use that value, otherwise treat as text")
    p.set_defaults(function="codepoint")

    p = subparsers.add_parser("width", help="Show how many columns text occupies in a terminal")
    p.set_defaults(function="width")
    p.add_argument(
        "--ambiguous-wide",
        default=False,
        action="store_true",
        help="Treat East Asian Ambiguous codepoints as two columns [%(default)s]",
    )
    p.add_argument("text", nargs="+", help="Text to measure, each argument separately")

    p = subparsers.add_parser(
        "benchmark",
        help="Measure how long segmentation takes to iterate each segment",
    )
    p.set_defaults(function="benchmark")
    p.add_argument(
        "--size",
        type=float,
        default=10,
        help="How many million characters (codepoints) of text to use [%(default)s]",
    )
    p.add_argument("--seed", type=int, default=0, help="Random seed to use [%(default)s]")
    p.add_argument(
        "--others",
        help="A comma separated list of other packages to also benchmark.  Use 'all' to get all available ones.  Supported are grapheme, uniseg, wcwidth",
    )
    p.add_argument(
        "text_file",
        type=argparse.FileType("rt", encoding="utf8"),
        help="""Text source to use.

        The provided text will be repeatedly duplicated and shuffled then
        appended until the sized amount of text is available.
        """,
    )

    options = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.WARNING, format="    %(name)s: %(message)s")

    def codepoint_details(kind: str, c: str, counter: int | None = None) -> str:
        if options.compact_codepoints:
            return f"U+{ord(c):04x}"
        name = codepoint_name(ord(c))
        cat = textseg.category(c)
        counter_text = f"#{counter}:" if counter is not None else ""
        classes = " | ".join(textseg.category_name(kind, c))
        return "{" + f"{counter_text}U+" + ("%04X" % ord(c)) + f" {name} ({ cat }) : { classes }" + "}"

    if options.function == "show":
        if not options.text_file and not options.text:
            parser.error("You must specify at least --text-file or text arguments")

        params = {} if options.show == "grapheme" else {"tailored": not options.untailored}

        text = ""
        if options.text_file:
            text += options.text_file.read()
            options.text_file.close()
        if options.text:
            if text:
                text += " "
            text += " ".join(options.text)

        iter_func = getattr(textseg, f"{ options.show }_iter_with_offsets")

        for counter, (begin, end, segment) in enumerate(iter_func(text, **params)):
            extra = ""
            if options.show == "grapheme":
                extra = f" width { textseg.cluster_width(segment) }"
            elif options.show == "word":
                extra = f" kind { textseg.word_kind(segment).name }"
            print(f"#{ counter } span { begin }-{ end } codepoints { end - begin }{ extra } value: { segment }")
            for i in range(begin, end):
                print(" ", codepoint_details(options.show, text[i]))

    elif options.function == "breaktest":
        # stop debug interpreter whining about file not being closed
        atexit.register(lambda: options.file.close())

        next_break_func = getattr(textseg, f"{ options.test }_next_break")
        if options.test != "grapheme":
            # the test files are for the plain rules
            next_break_func = functools.partial(next_break_func, tailored=False)

        try:
            passed, failures = run_break_test(
                options.file,
                next_break_func,
                fail_fast=options.fail_fast,
                show=(lambda line_num, line: print(f"{ line_num }: { line.rstrip() }")) if options.show_lines else None,
            )
        except ValueError as exc:
            sys.exit(str(exc))

        if failures:
            print(f"{ len(failures) } tests failed, {passed:,} passed:", file=sys.stderr)
            for failure in failures:
                print(
                    f"Line { failure.line_num } got breaks at { failure.seen } expected at { failure.expected }",
                    file=sys.stderr,
                )
                if max(len(failure.seen), len(failure.expected)) > 5:
                    for diff in describe_difference(failure.seen, failure.expected):
                        print(diff, file=sys.stderr)
                print(failure.line, file=sys.stderr)
                print(
                    " ".join(codepoint_details(options.test, c, i) for i, c in enumerate(failure.text)),
                    file=sys.stderr,
                )
                print(file=sys.stderr)
            sys.exit(2)
        else:
            print(f"{passed:,} passed")

    elif options.function == "codepoint":
        codepoints = []
        for t in options.text:
            try:
                codepoints.append(int(t, 16))
            except ValueError:
                codepoints.extend(ord(c) for c in t)

        for i, cp in enumerate(codepoints):
            try:
                cp = _ucd.codepoint_value(cp)
            except ValueError as exc:
                sys.exit(str(exc))
            print(f"#{ i } U+{ cp:04X} - ", end="")
            try:
                print(chr(cp))
            except UnicodeEncodeError:
                print()
            print(
                f"Name: { codepoint_name(cp) }  Category: { textseg.category(cp) }  "
                f"East Asian Width: { textseg.east_asian_width(cp) }"
            )
            print(
                f"Width: { textseg.codepoint_width(cp) }  "
                f"TR29 grapheme: { ' | '.join(textseg.category_name('grapheme', cp)) }   "
                f"word: { ' | '.join(textseg.category_name('word', cp )) }   "
                f"sentence: { ' | '.join(textseg.category_name('sentence', cp)) }"
            )
            print()

    elif options.function == "width":
        ambiguous_width = 2 if options.ambiguous_wide else 1
        for text in options.text:
            print(f"{ textseg.text_width(text, ambiguous_width=ambiguous_width) }\t{ text }")

    elif options.function == "benchmark":
        import random
        import time

        random.seed(options.seed)

        base_text = options.text_file.read()
        options.text_file.close()
        if not base_text:
            sys.exit("The text file is empty")
        text = base_text

        # these are the non-ascii codepoints used in the various break tests
        interesting = "".join(
            chr(int(x, 16))
            for x in """0085 00A0 00AD 01BB 0300 0308 034F 0378 05D0 0600 062D 0631
                0644 0645 0646 064A 064E 0650 0651 0661 0671 06DD 070F 0710 0712 0717
                0718 0719 071D 0721 072A 072B 072C 0900 0903 0904 0915 0924 092F 093C
                094D 0A03 0D4E 1100 1160 11A8 200D 2018 2019 201C 201D 2060 231A 2701
                3002 3031 5B57 5B83 AC00 AC01 1F1E6 1F1E7 1F1E8 1F1E9 1F3FF 1F476
                1F6D1""".split()
        )

        # make interesting be 0.1% of base text
        base_text += interesting * int(len(interesting) / (len(base_text) * 0.001))

        def width_lines(measure, text):
            for line in text.splitlines():
                yield measure(line)

        tests: list[Any] = [
            (
                "textseg",
                textseg.unicode_version,
                (
                    ("grapheme", textseg.grapheme_iter),
                    ("word", textseg.word_iter),
                    ("sentence", textseg.sentence_iter),
                    ("width", functools.partial(width_lines, textseg.text_width)),
                ),
            )
        ]

        if options.others:
            if options.others == "all":
                ok = []
                try:
                    import uniseg

                    ok.append("uniseg")
                except ImportError:
                    pass
                try:
                    import grapheme

                    ok.append("grapheme")
                except ImportError:
                    pass
                try:
                    import wcwidth

                    ok.append("wcwidth")
                except ImportError:
                    pass
                if ok:
                    options.others = ",".join(ok)
                else:
                    options.others = None

        if options.others:
            for package in options.others.split(","):
                package = package.strip()
                if package == "grapheme":
                    import grapheme
                    import grapheme.finder

                    tests.append(
                        ("grapheme", grapheme.UNICODE_VERSION, (("grapheme", grapheme.finder.GraphemeIterator),))
                    )
                elif package == "uniseg":
                    import uniseg
                    import uniseg.graphemecluster
                    import uniseg.wordbreak
                    import uniseg.sentencebreak

                    tests.append(
                        (
                            "uniseg",
                            uniseg.unidata_version,
                            (
                                ("grapheme", uniseg.graphemecluster.grapheme_clusters),
                                ("word", uniseg.wordbreak.words),
                                ("sentence", uniseg.sentencebreak.sentences),
                            ),
                        )
                    )
                elif package == "wcwidth":
                    import wcwidth

                    tests.append(
                        (
                            "wcwidth",
                            wcwidth.list_versions()[-1],
                            (("width", functools.partial(width_lines, wcwidth.wcswidth)),),
                        )
                    )
                else:
                    sys.exit(f"Unknown third party package to benchmark '{package}'")

        print(f"Expanding text to { options.size } million chars ...", end="", flush=True)
        while len(text) < options.size * 1_000_000:
            text += "".join(random.sample(base_text, len(base_text)))
        text = text[: int(options.size * 1_000_000)]

        print("\nResults in codepoints per second processed, returning each segment.  Higher is faster.")

        for name, version, parts in tests:
            print(f"\nBenchmarking {name:20s} unicode version { version }")

            for kind, func in parts:
                print(f"{kind:>8}", end=" ", flush=True)
                count = 0
                start = time.process_time_ns()
                exc = None
                try:
                    for _ in func(text):
                        count += 1
                except Exception as exc2:
                    exc = exc2
                end = time.process_time_ns()
                if exc is not None:
                    print(f"       EXCEPTION {exc!r}")
                else:
                    seconds = max(end - start, 1) / 1e9
                    print(f"codepoints per second: { int(len(text)/seconds): 12,d}    segments: {count: 11,d}")

        log.debug("class lookup cache %s", _ucd.grapheme_class.cache_info())  # type: ignore[attr-defined]


if __name__ == "__main__":
    main()
