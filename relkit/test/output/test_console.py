"""Tests for relkit.output.console module."""

from __future__ import annotations

import pytest

from relkit.output.console import (
    ConsoleProtocol,
    MockConsole,
    NullConsole,
    OutputRecord,
    RichConsole,
    Style,
)


class TestStyle:
    """Test Style enum."""

    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DEBUG", "DIM"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    """Test MockConsole for testing purposes."""

    def test_print_captures_message(self) -> None:
        console = MockConsole()
        console.print("hello")
        assert console.outputs == [OutputRecord("hello", Style.DEFAULT)]

    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")
        console.info("fyi")
        console.debug("trace")
        assert console.messages == [
            "OK done",
            "error: failed",
            "warning: careful",
            "info: fyi",
            "debug: trace",
        ]

    def test_has_error_and_warning(self) -> None:
        console = MockConsole()
        assert not console.has_error()
        console.warning("w")
        assert console.has_warning()
        assert not console.has_error()
        console.error("e")
        assert console.has_error()

    def test_find_and_count(self) -> None:
        console = MockConsole()
        console.info("Using latest artifact a.zip")
        console.info("other")
        assert len(console.find("latest")) == 1
        assert console.count(Style.INFO) == 2

    def test_clear(self) -> None:
        console = MockConsole()
        console.print("x")
        console.clear()
        assert console.outputs == []
        assert console.text == ""

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("typed")


class TestNullConsole:
    def test_discards_everything(self) -> None:
        console: ConsoleProtocol = NullConsole()
        console.print("a", Style.DIM)
        console.success("a")
        console.error("a")
        console.warning("a")
        console.info("a")
        console.debug("a")


class TestRichConsole:
    """RichConsole writes through Rich."""

    def test_info_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().info("artifact [core] found")
        out = capsys.readouterr().out
        assert "info:" in out
        assert "artifact [core] found" in out

    def test_debug_hidden_unless_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().debug("hidden detail")
        assert "hidden detail" not in capsys.readouterr().out

        RichConsole(verbose=True).debug("shown detail")
        assert "shown detail" in capsys.readouterr().out

    def test_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(stderr=True).error("boom")
        captured = capsys.readouterr()
        assert "boom" in captured.err
        assert "boom" not in captured.out
