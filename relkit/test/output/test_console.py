"""Tests for relkit.output.console module."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from relkit.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


def _rich() -> tuple[RichConsole, StringIO]:
    buf = StringIO()
    return RichConsole(Console(file=buf, force_terminal=False, width=200)), buf


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.HEADER) == "header"


class TestMockConsole:
    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs[0].message == "hello"
        assert console.outputs[0].style == Style.DEFAULT

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("tagged v1.0")
        console.error("boom")
        console.warning("careful")
        console.info("fyi")
        assert console.messages == [
            "OK tagged v1.0",
            "error: boom",
            "warning: careful",
            "info: fyi",
        ]

    def test_headers(self) -> None:
        console = MockConsole()
        console.header("vcs-checks")
        console.info("x")
        console.header("tag-release")
        assert console.headers == ["vcs-checks", "tag-release"]

    def test_helpers(self) -> None:
        console = MockConsole()
        console.warning("Remember to push the changes yourself!")
        assert console.has_warning()
        assert not console.has_error()
        assert len(console.find("push")) == 1
        assert console.count(Style.WARNING) == 1
        console.clear()
        assert console.outputs == []

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.newline()


class TestRichConsole:
    def test_brackets_are_not_markup(self) -> None:
        console, buf = _rich()
        console.warning("The current tag [v1.0] does not point to the commit for this release!")
        assert "[v1.0]" in buf.getvalue()

    def test_print_plain(self) -> None:
        console, buf = _rich()
        console.print("branch [main]", Style.DIM)
        assert "branch [main]" in buf.getvalue()

    def test_error_prefix(self) -> None:
        console, buf = _rich()
        console.error("not a repository")
        assert "error: not a repository" in buf.getvalue()
