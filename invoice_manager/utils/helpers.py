"""
Helper Utilities Module.

This module provides common utility functions used throughout the
invoice manager. Functions here should be generic and reusable across
different modules.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - get_file_name: Last path component of a stored file path
    - format_currency: Render an amount for console output
"""

from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("data/uploads")
        PosixPath('data/uploads')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the file extension from a filepath.

    Returns the extension in lowercase, including the dot.
    Returns empty string if no extension exists.

    Example:
        >>> get_file_extension("factura.PDF")
        '.pdf'
    """
    return Path(filepath).suffix.lower()


def get_file_name(file_path: str) -> str:
    """
    Return the file name of a stored (slash separated) file path.

    Example:
        >>> get_file_name("user/2024/factura.png")
        'factura.png'
        >>> get_file_name("")
        'Archivo sin nombre'
    """
    parts = (file_path or "").replace("\\", "/").split("/")
    return parts[-1] or "Archivo sin nombre"


def format_currency(amount: float, currency: str = "MXN") -> str:
    """
    Format an amount with thousands separators and two decimals.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50 MXN'
    """
    symbol = "€" if currency == "EUR" else "$"
    return f"{symbol}{amount:,.2f} {currency}"
