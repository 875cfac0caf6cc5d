"""Testes para o sistema de exceções customizadas."""

import pytest

from ps3batch.common.exceptions import (
    Ps3BatchError,
    ConfigurationError,
    ValidationError,
    SfoParseError,
    TruncatedError,
    BadMagicError,
    SfoEntryError,
    EntryOutOfBoundsError,
    FileOperationError,
    FileNotFoundError,
    MissingRequiredFileError,
    UnreadableSourceError,
    ScriptWriteError,
    format_exception_chain,
)


class TestBaseException:
    """Testes para a exceção base."""

    def test_basic_creation(self):
        exc = Ps3BatchError("test error")
        assert str(exc) == "test error"
        assert exc.message == "test error"
        assert exc.details == {}

    def test_with_details(self):
        exc = Ps3BatchError("test error", {"key": "value", "count": 42})
        assert "key=value" in str(exc)
        assert "count=42" in str(exc)

    def test_inheritance(self):
        for exc in (ConfigurationError("x"), ValidationError("x"), SfoParseError("x")):
            assert isinstance(exc, Ps3BatchError)
            assert isinstance(exc, Exception)


class TestSfoErrors:
    """Testes para erros do PARAM.SFO."""

    def test_truncated(self):
        exc = TruncatedError(7)
        assert exc.size == 7
        assert isinstance(exc, SfoParseError)
        assert "7 bytes" in str(exc)

    def test_bad_magic(self):
        exc = BadMagicError(0xDEADBEEF)
        assert exc.magic == 0xDEADBEEF
        assert "0xDEADBEEF" in str(exc)

    def test_entry_errors_are_not_parse_errors(self):
        exc = EntryOutOfBoundsError(3, "data past end")
        assert exc.index == 3
        assert exc.reason == "data past end"
        assert isinstance(exc, SfoEntryError)
        assert not isinstance(exc, SfoParseError)


class TestFileOperationErrors:
    """Testes para erros de operações de ficheiros."""

    def test_file_operation_error(self):
        exc = FileOperationError("/path/to/file", "failed to process")
        assert exc.path == "/path/to/file"
        assert "failed to process" in str(exc)
        assert "path=/path/to/file" in str(exc)

    def test_file_not_found(self):
        exc = FileNotFoundError("/missing/rpcs3.exe")
        assert exc.path == "/missing/rpcs3.exe"
        assert "not found" in str(exc).lower()

    def test_file_not_found_is_not_builtin(self):
        import builtins

        assert not issubclass(FileNotFoundError, builtins.FileNotFoundError)

    def test_missing_required_file(self):
        exc = MissingRequiredFileError("/games/G", ["USRDIR/EBOOT.BIN"])
        assert exc.missing == ["USRDIR/EBOOT.BIN"]
        assert "EBOOT.BIN" in str(exc)

    def test_unreadable_source(self):
        exc = UnreadableSourceError("/games/G/PARAM.SFO", "Permission denied")
        assert exc.reason == "Permission denied"
        assert "Permission denied" in str(exc)

    def test_script_write_error(self):
        cause = PermissionError("denied")
        exc = ScriptWriteError("/out/G.bat", cause)
        assert exc.cause is cause
        assert exc.details["cause"] == "PermissionError"


class TestExceptionChainFormatting:
    """Testes para formatação de cadeia de exceções."""

    def test_single_exception(self):
        exc = ValidationError("test error")
        formatted = format_exception_chain(exc)
        assert "test error" in formatted

    def test_exception_chain(self):
        inner = OSError("disk full")
        outer = ScriptWriteError("/out/G.bat", inner)
        outer.__cause__ = inner

        formatted = format_exception_chain(outer)
        assert "Failed to write" in formatted
        assert "OSError: disk full" in formatted
        assert "→" in formatted

    def test_with_traceback(self):
        try:
            raise ValidationError("test with traceback")
        except ValidationError as e:
            formatted = format_exception_chain(e, include_traceback=True)
            assert "Traceback" in formatted
            assert "test with traceback" in formatted


@pytest.mark.parametrize("size", [0, 19])
def test_truncated_required_default(size):
    assert TruncatedError(size).details["required"] == 20
