#!/usr/bin/env python3

# Generates textseg/_tables.py range data from the Unicode
# Character Database.  Everything the lookups need is generated, so
# results do not depend on the interpreter's unicodedata version.

from __future__ import annotations

import sys
import os
import itertools
import logging
import pathlib
import re
import urllib.request

from typing import Any, Iterable

log = logging.getLogger("ucdprops2code")

ucd_version = None


def extract_version(filename: str, source: str):
    global ucd_version
    if filename == "emoji-data.txt":
        for line in source.splitlines():
            if line.startswith("# Used with Emoji Version "):
                mo = re.match(r".*Version (?P<version>[^\s]+)\s.*", line)
                break
        else:
            raise ValueError("No matching version line found")
    else:
        mo = re.match(r"# [^-]+-(?P<version>.*)\.txt", source.splitlines()[0])
    # we only care about major.minor - emoji data doesn't even have patch
    version = ".".join(mo.group("version").split(".")[:2])
    if ucd_version is None:
        ucd_version = version
    elif ucd_version != version:
        sys.exit(f"Already saw {ucd_version=} but {filename=} is {version=}")


def parse_source_lines(source: str):
    for line in source.splitlines():
        if not line.strip() or line.startswith("#"):
            continue
        line = line.split("#", 1)[0]
        vals, prop = line.split(";", 1)
        prop = prop.strip()
        vals = vals.strip().split("..")
        if len(vals) == 1:
            yield int(vals[0], 16), int(vals[0], 16), prop
        else:
            yield int(vals[0], 16), int(vals[1], 16), prop


def parse_missing_lines(source: str):
    "Yields the defaults declared by # @missing lines"
    for line in source.splitlines():
        mo = re.match(r"# @missing: (?P<start>[0-9A-F]+)\.\.(?P<end>[0-9A-F]+)\s*; (?P<prop>\w+)", line)
        if mo:
            yield int(mo.group("start"), 16), int(mo.group("end"), 16), mo.group("prop")


def populate(source: str, dest: dict[str, set[int]]):
    for start, end, prop in parse_source_lines(source):
        dest.setdefault(prop, set()).update(range(start, end + 1))


props: dict[str, dict[str, set[int]]] = {
    "category": {},
    "emoji": {},
    "core": {},
    "grapheme": {},
    "word": {},
    "sentence": {},
}

# later lines override earlier ones, so this is kept by codepoint
east_asian_widths: dict[int, str] = {}


def populate_width(source: str):
    for start, end, prop in itertools.chain(parse_missing_lines(source), parse_source_lines(source)):
        for codepoint in range(start, end + 1):
            east_asian_widths[codepoint] = prop


def read_props(data_dir: str | None):
    def get_source(url: str) -> str:
        parts = url.split("/")
        location: Any = url
        if data_dir:
            candidates = (
                pathlib.Path(data_dir) / parts[-1],
                pathlib.Path(data_dir) / parts[-2] / parts[-1],
            )
            for location in candidates:
                if location.exists():
                    break
            else:
                sys.exit(f"Failed to find file in data dir.  Looked for\n{candidates}")

        log.info("Reading %s", location)
        if isinstance(location, str):
            return urllib.request.urlopen(location).read().decode("utf8")
        return location.read_text("utf8")

    base = "https://www.unicode.org/Public/UCD/latest/ucd"

    for name, url in (
        ("category", f"{ base }/extracted/DerivedGeneralCategory.txt"),
        ("width", f"{ base }/EastAsianWidth.txt"),
        ("emoji", f"{ base }/emoji/emoji-data.txt"),
        ("core", f"{ base }/DerivedCoreProperties.txt"),
        ("grapheme", f"{ base }/auxiliary/GraphemeBreakProperty.txt"),
        ("word", f"{ base }/auxiliary/WordBreakProperty.txt"),
        ("sentence", f"{ base }/auxiliary/SentenceBreakProperty.txt"),
    ):
        source = get_source(url)
        extract_version(url.split("/")[-1], source)
        if name == "width":
            populate_width(source)
            continue
        populate(source, props[name])
        log.debug("%s has %d properties", url.split("/")[-1], len(props[name]))


def to_ranges(codepoints: Iterable[int]) -> list[tuple[int, int]]:
    ranges: list[list[int]] = []
    for cp in sorted(codepoints):
        if ranges and ranges[-1][1] + 1 == cp:
            ranges[-1][1] = cp
        else:
            ranges.append([cp, cp])
    return [tuple(r) for r in ranges]  # type: ignore[misc]


def to_value_ranges(values: dict[int, str]) -> list[tuple[int, int, str]]:
    "Merges adjacent codepoints with the same value"
    ranges: list[list[Any]] = []
    for cp in sorted(values):
        if ranges and ranges[-1][1] + 1 == cp and ranges[-1][2] == values[cp]:
            ranges[-1][1] = cp
        else:
            ranges.append([cp, cp, values[cp]])
    return [tuple(r) for r in ranges]  # type: ignore[misc]


def by_codepoint(source: dict[str, set[int]], default: str) -> dict[int, str]:
    "Inverts value -> codepoints, leaving out the default value"
    res: dict[int, str] = {}
    for value, codepoints in source.items():
        if value != default:
            for cp in codepoints:
                res[cp] = value
    return res


def grapheme_values() -> dict[int, str]:
    res = by_codepoint(props["grapheme"], "Other")
    core = props["core"]
    for cp in core["InCB; Extend"]:
        if res.get(cp) == "Extend":
            res[cp] = "InCB_Extend"
    for cp in core["InCB; Linker"]:
        res[cp] = "InCB_Linker"
    for cp in core["InCB; Consonant"]:
        res.setdefault(cp, "InCB_Consonant")
    for cp in props["emoji"]["Extended_Pictographic"]:
        res.setdefault(cp, "Extended_Pictographic")
    # LV and LVT alternate so syllables are computed instead
    for cp in range(0xAC00, 0xD7A4):
        res.pop(cp, None)
    return res


def word_values() -> dict[int, str]:
    res = by_codepoint(props["word"], "Other")
    for cp in props["emoji"]["Extended_Pictographic"]:
        res.setdefault(cp, "Extended_Pictographic")
    return res


def get_tables() -> list[tuple[str, str, set[int] | dict[int, str]]]:
    "name, comment, codepoints or values for each table in the order they appear"
    return [
        ("EXTENDED_PICTOGRAPHIC", "emoji-data.txt Extended_Pictographic", props["emoji"]["Extended_Pictographic"]),
        (
            "GRAPHEME_BREAK",
            "GraphemeBreakProperty.txt with InCB and Extended_Pictographic folded in, less Hangul syllables",
            grapheme_values(),
        ),
        ("WORD_BREAK", "WordBreakProperty.txt with Extended_Pictographic folded in", word_values()),
        ("SENTENCE_BREAK", "SentenceBreakProperty.txt", by_codepoint(props["sentence"], "Other")),
        ("GENERAL_CATEGORY", "DerivedGeneralCategory.txt", by_codepoint(props["category"], "Cn")),
        (
            "EAST_ASIAN_WIDTH",
            "EastAsianWidth.txt",
            {cp: width for cp, width in east_asian_widths.items() if width != "N"},
        ),
    ]


def fmt(v: int) -> str:
    # format values the same as in the text source for easy grepping
    return f"0x{v:04X}"


def pack(items: list[str], width: int = 100) -> list[str]:
    "Fills lines with as many items as fit"
    lines: list[str] = []
    line = ""
    for item in items:
        if line and len(f"    { line } { item }") > width:
            lines.append(f"    { line }")
            line = item
        else:
            line = f"{ line } { item }" if line else item
    if line:
        lines.append(f"    { line }")
    return lines


def generate_table(name: str, comment: str, data: set[int] | dict[int, str]) -> list[str]:
    res = []
    if comment:
        res.append(f"# { comment }")
    res.append(f"{ name } = (")
    if isinstance(data, dict):
        items = [f'({ fmt(start) }, { fmt(end) }, "{ value }"),' for start, end, value in to_value_ranges(data)]
    else:
        items = [f"({ fmt(start) }, { fmt(end) })," for start, end in to_ranges(data)]
    res.extend(pack(items))
    res.append(")")
    res.append("")
    log.debug("%s %d ranges %d codepoints", name, len(items), len(data))
    return res


def get_unicode_section() -> str:
    res = []
    res.append(f'unicode_version = "{ ucd_version }"')
    res.append('"""The `Unicode version <https://www.unicode.org/versions/enumeratedversions.html>`__')
    res.append('that the rules and data tables implement"""')
    res.append("")
    for name, comment, codepoints in get_tables():
        res.extend(generate_table(name, comment, codepoints))
    return "\n".join(res)


def replace_if_different(filename: str, contents: str) -> bool:
    "Returns True if the file was changed"
    if not os.path.exists(filename) or pathlib.Path(filename).read_text(encoding="utf8") != contents:
        log.info("%s %s", "Creating" if not os.path.exists(filename) else "Updating", filename)
        pathlib.Path(filename).write_text(contents, encoding="utf8")
        return True
    return False


def update_section(source: str) -> str:
    lines = []
    in_replacement = False
    for line in source.splitlines():
        if line == "### BEGIN UNICODE UPDATE SECTION ###":
            in_replacement = True
            lines.append(line)
            continue
        if in_replacement and line == "### END UNICODE UPDATE SECTION ###":
            in_replacement = False
            lines.append(get_unicode_section())
            lines.append(line)
            continue
        if not in_replacement:
            lines.append(line)
    if in_replacement:
        sys.exit("Unterminated ### BEGIN UNICODE UPDATE SECTION ###")
    return "\n".join(lines) + "\n"


if __name__ == "__main__":
    import argparse

    p = argparse.ArgumentParser(description="Generate range tables from Unicode properties")
    p.add_argument(
        "--data-dir",
        help="Directory containing local copies of the relevant unicode database files.  If "
        "not supplied the latest files are read from https://www.unicode.org/Public/UCD/latest/ucd/",
    )
    p.add_argument(
        "--check",
        default=False,
        action="store_true",
        help="Exit with code 1 if the file would change rather than updating it",
    )
    p.add_argument("--verbose", default=False, action="store_true", help="Show statistics for each table")
    p.add_argument("out_file", help="File with an update section to rewrite, usually textseg/_tables.py")

    options = p.parse_args()

    logging.basicConfig(level=logging.DEBUG if options.verbose else logging.INFO, format="    %(message)s")

    read_props(options.data_dir)

    contents = update_section(pathlib.Path(options.out_file).read_text(encoding="utf8"))

    if options.check:
        if pathlib.Path(options.out_file).read_text(encoding="utf8") != contents:
            log.info("%s is out of date for Unicode %s", options.out_file, ucd_version)
            sys.exit(1)
        log.info("%s is current for Unicode %s", options.out_file, ucd_version)
    else:
        replace_if_different(options.out_file, contents)
