"""Tests for the console output module."""

import io

from requests.structures import CaseInsensitiveDict
from rich.console import Console

from hopdriver.console import chain, error, info, status, warn, where
from hopdriver.transports.base import Response


def make_console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, stderr=True, no_color=True, width=120), buf


class TestConsoleHelpers:
    """Tests for console helper functions."""

    def test_error_outputs_red_x(self) -> None:
        """Test error prints red X to stderr."""
        test_console, buf = make_console()
        error("Failed", console=test_console)
        assert "✗ Failed" in buf.getvalue()

    def test_warn_outputs_yellow(self) -> None:
        """Test warn prints yellow message to stderr."""
        test_console, buf = make_console()
        warn("Careful", console=test_console)
        assert "Careful" in buf.getvalue()

    def test_info_outputs_dim(self) -> None:
        """Test info prints dim message to stderr."""
        test_console, buf = make_console()
        info("Note", console=test_console)
        assert "Note" in buf.getvalue()


class TestResponseOutput:
    """Tests for status line and redirect chain output."""

    def test_where(self) -> None:
        assert where(True) == "remote"
        assert where(False) == "local"

    def test_status_line(self) -> None:
        test_console, buf = make_console()
        response = Response(
            200, "OK", CaseInsensitiveDict(), b"", "http://www.remote.com/", remote=True
        )
        status(response, console=test_console)
        assert buf.getvalue().strip() == "HTTP 200 OK http://www.remote.com/ (remote)"

    def test_chain_numbers_hops(self) -> None:
        test_console, buf = make_console()
        chain(["http://a.test/1", "http://a.test/2"], console=test_console)
        lines = buf.getvalue().splitlines()
        assert lines[0].strip() == "↪ 1: http://a.test/1"
        assert lines[1].strip() == "↪ 2: http://a.test/2"
