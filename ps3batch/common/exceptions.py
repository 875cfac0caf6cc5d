"""Hierarquia de exceções do ps3batch.

Este módulo centraliza todas as exceções específicas do projeto. Os erros
por-pasta (metadados ilegíveis, ficheiros em falta, escrita do .bat) são
não-fatais: o orquestrador regista-os e continua com a pasta seguinte.
"""

from __future__ import annotations
from typing import Optional, Any


# ============================================================================
# BASE EXCEPTIONS
# ============================================================================

class Ps3BatchError(Exception):
    """Exceção base para todos os erros do ps3batch."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# ============================================================================
# CONFIGURATION & VALIDATION ERRORS
# ============================================================================

class ConfigurationError(Ps3BatchError):
    """Erro relacionado com o ficheiro de configurações."""
    pass


class ValidationError(Ps3BatchError):
    """Pré-condição inválida (executável ou pasta raiz)."""
    pass


# ============================================================================
# PARAM.SFO ERRORS
# ============================================================================

class SfoParseError(Ps3BatchError):
    """O buffer não é um PARAM.SFO utilizável."""
    pass


class TruncatedError(SfoParseError):
    """Buffer mais curto que o cabeçalho de 20 bytes."""

    def __init__(self, size: int, required: int = 20):
        super().__init__(
            f"SFO buffer truncated: {size} bytes, header needs {required}",
            {"size": size, "required": required},
        )
        self.size = size


class BadMagicError(SfoParseError):
    """Número mágico diferente de 0x46535000."""

    def __init__(self, magic: int):
        super().__init__(
            f"Invalid SFO magic 0x{magic:08X}", {"expected": "0x46535000"}
        )
        self.magic = magic


class SfoEntryError(Ps3BatchError):
    """Uma entrada da tabela foi ignorada; o resto do ficheiro continua válido."""

    def __init__(self, index: int, reason: str):
        super().__init__(f"SFO entry {index} skipped: {reason}", {"index": index})
        self.index = index
        self.reason = reason


class EntryOutOfBoundsError(SfoEntryError):
    """Offsets ou comprimentos da entrada apontam para fora do buffer."""
    pass


# ============================================================================
# FILE OPERATION ERRORS
# ============================================================================

class FileOperationError(Ps3BatchError):
    """Erro base para operações com ficheiros."""

    def __init__(self, path: str, message: str, details: Optional[dict] = None):
        details = details or {}
        details["path"] = path
        super().__init__(message, details)
        self.path = path


class FileNotFoundError(FileOperationError):
    """Ficheiro não encontrado."""

    def __init__(self, path: str):
        super().__init__(path, f"Not found: {path}")


class MissingRequiredFileError(FileOperationError):
    """A pasta não tem EBOOT.BIN ou PARAM.SFO no sítio esperado."""

    def __init__(self, path: str, missing: list[str]):
        names = ", ".join(missing)
        super().__init__(path, f"Missing required file(s): {names}")
        self.missing = list(missing)


class UnreadableSourceError(FileOperationError):
    """PARAM.SFO existe mas não pode ser lido."""

    def __init__(self, path: str, reason: str = ""):
        msg = f"Could not read {path}"
        if reason:
            msg += f": {reason}"
        super().__init__(path, msg, {"reason": reason})
        self.reason = reason


class ScriptWriteError(FileOperationError):
    """Falha ao escrever o ficheiro .bat."""

    def __init__(self, path: str, cause: BaseException):
        super().__init__(
            path, f"Failed to write {path}: {cause}", {"cause": type(cause).__name__}
        )
        self.cause = cause


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def format_exception_chain(exc: BaseException, include_traceback: bool = False) -> str:
    """Formata uma exceção com toda a cadeia de causas.

    Args:
        exc: Exceção a formatar
        include_traceback: Se deve incluir o traceback completo

    Returns:
        String formatada com a exceção e suas causas
    """
    import traceback

    if include_traceback:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    messages = []
    current: Optional[BaseException] = exc
    while current is not None:
        if isinstance(current, Ps3BatchError):
            messages.append(str(current))
        else:
            messages.append(f"{type(current).__name__}: {current}")
        current = getattr(current, "__cause__", None)

    return " → ".join(messages)
