"""Utilitários de validação de entrada.

Usados pelo orquestrador e pela CLI para as pré-condições que abortam uma
execução antes de qualquer scan (executável do RPCS3, pasta de jogos).
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .exceptions import ValidationError, FileNotFoundError


# ============================================================================
# PATH VALIDATION
# ============================================================================

def validate_path_exists(
    path: Path | str | None,
    name: str = "path",
    must_be_file: bool = False,
    must_be_dir: bool = False
) -> Path:
    """Valida que um caminho existe.

    Args:
        path: Caminho a validar
        name: Nome do parâmetro (para mensagens de erro)
        must_be_file: Se True, valida que é um ficheiro
        must_be_dir: Se True, valida que é um diretório

    Returns:
        Path validado e resolvido

    Raises:
        ValidationError: Se o caminho estiver vazio ou for do tipo errado
        FileNotFoundError: Se o caminho não existir
    """
    if not path or not str(path).strip():
        raise ValidationError(f"{name} must not be empty")

    p = Path(path).expanduser().resolve()

    if not p.exists():
        raise FileNotFoundError(str(p))

    if must_be_file and not p.is_file():
        raise ValidationError(f"{name} must be a file: {p}")

    if must_be_dir and not p.is_dir():
        raise ValidationError(f"{name} must be a directory: {p}")

    return p


def validate_writable_directory(path: Path | str | None, name: str = "directory") -> Path:
    """Valida que um diretório existe e é gravável.

    Raises:
        ValidationError: Se não existir ou não for gravável
    """
    p = validate_path_exists(path, name, must_be_dir=True)

    test_file = p / ".ps3batch_write_test"
    try:
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        raise ValidationError(f"{name} is not writable: {p}", {"error": str(e)}) from e

    return p


def validate_file_extension(
    path: Path | str,
    allowed_extensions: Iterable[str],
    case_sensitive: bool = False
) -> Path:
    """Valida que um ficheiro tem uma extensão permitida.

    Raises:
        ValidationError: Se extensão não for permitida
    """
    p = Path(path)
    ext = p.suffix if case_sensitive else p.suffix.lower()

    allowed = set(allowed_extensions)
    if not case_sensitive:
        allowed = {e.lower() for e in allowed}

    if ext not in allowed:
        raise ValidationError(
            f"Extension {ext or '(none)'} not supported. Allowed: {', '.join(sorted(allowed))}"
        )

    return p


# ============================================================================
# STRING VALIDATION
# ============================================================================

def validate_not_empty(value: str | None, name: str = "value") -> str:
    """Valida que uma string não está vazia."""
    if not value or not value.strip():
        raise ValidationError(f"{name} must not be empty")
    return value
