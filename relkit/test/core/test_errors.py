"""Tests for relkit.core.errors module."""

from relkit.core.errors import ErrorCode


def test_exit_codes_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.BUILD_ERROR) == 3
    assert int(ErrorCode.VCS_ERROR) == 4
    assert int(ErrorCode.IO_ERROR) == 5


def test_str_is_human_readable() -> None:
    assert str(ErrorCode.VCS_ERROR) == "vcs error"


def test_success_flags() -> None:
    assert ErrorCode.OK.is_success
    assert not ErrorCode.OK.is_error
    assert ErrorCode.IO_ERROR.is_error
