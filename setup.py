#!/usr/bin/env python3

from __future__ import annotations

import os
import re
import sys
import pathlib
import urllib.request

from setuptools import setup, Command

project_urls = {
    "Documentation": "https://www.unicode.org/reports/tr29/",
    "Code": "https://github.com/textseg/textseg",
}


def write(*args):
    dest = sys.stdout
    if args[-1] == sys.stderr:
        dest = args[-1]
        args = args[:-1]
    dest.write(" ".join(args) + "\n")
    dest.flush()


# ensure files are closed
def read_whole_file(name, mode):
    assert mode == "rt"
    f = open(name, mode, encoding="utf8")
    try:
        return f.read()
    finally:
        f.close()


# work out version number
version = re.search(
    r'^__version__ = "(.+)"$', read_whole_file(os.path.join("textseg", "__init__.py"), "rt"), re.MULTILINE
).group(1)


# Run test suite
class run_tests(Command):
    description = "Run test suite"

    # I did originally try using 'verbose' as the option but it turns
    # out that is builtin and defaults to 1 (--quiet is also builtin
    # and forces verbose to 0)
    user_options = [
        ("show-tests", "v", "Show each test being run"),
        ("locals", None, "Show local variables in test failure"),
    ]

    # see if you can find boolean_options documented anywhere
    boolean_options = ["show-tests", "locals"]

    def initialize_options(self):
        self.show_tests = 0
        self.locals = False

    def finalize_options(self):
        pass

    def run(self):
        import unittest
        import textseg.tests

        suite = unittest.TestLoader().loadTestsFromModule(textseg.tests)
        # verbosity of zero doesn't print anything, one prints a dot
        # per test and two prints each test name
        result = unittest.TextTestRunner(verbosity=self.show_tests + 1, tb_locals=self.locals).run(suite)
        if not result.wasSuccessful():
            sys.exit(1)


class fetch(Command):
    description = "Downloads the Unicode database zip used by the extended tests"
    user_options = [
        ("unicode-version=", None, "Which version of the Unicode database to get (default latest)"),
    ]

    def initialize_options(self):
        self.unicode_version = None

    def finalize_options(self):
        if self.unicode_version is None:
            self.unicode_version = "latest"

    def run(self):
        dest = pathlib.Path(__file__).parent.parent / "textseg-extended-testing"
        dest.mkdir(exist_ok=True)
        url = "https://www.unicode.org/Public/UCD/latest/ucd/UCD.zip"
        if self.unicode_version != "latest":
            url = f"https://www.unicode.org/Public/{ self.unicode_version }.0/ucd/UCD.zip"
        write("  Getting", url)
        data = urllib.request.urlopen(url).read()
        (dest / "UCD.zip").write_bytes(data)
        write(f"    { len(data):,} bytes written to", str(dest / "UCD.zip"))


if __name__ == "__main__":
    setup(
        name="textseg",
        version=version,
        python_requires=">=3.9",
        description="Unicode grapheme cluster, word, and sentence segmentation plus terminal display width",
        long_description=pathlib.Path("README.rst").read_text(encoding="utf8"),
        long_description_content_type="text/x-rst",
        url="https://github.com/textseg/textseg",
        project_urls=project_urls,
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "Programming Language :: Python :: 3",
            "Topic :: Text Processing",
        ],
        keywords=["unicode", "grapheme", "segmentation", "tr29", "width"],
        platforms="any",
        packages=["textseg"],
        package_data={"textseg": ["py.typed"]},
        extras_require={
            "benchmark": ["uniseg", "grapheme", "wcwidth"],
            "test": ["pytest"],
        },
        entry_points={"console_scripts": ["textseg=textseg.__main__:main"]},
        cmdclass={
            "test": run_tests,
            "fetch": fetch,
        },
    )
