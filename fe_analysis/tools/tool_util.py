"""Utilities for tool handling."""

import typing as tp
from functools import wraps
from pathlib import Path

import click

from fe_analysis.utils.exceptions import SetUpError, TableFormatError


def analysis_error_handler(
    func: tp.Callable[..., None]
) -> tp.Callable[..., None]:
    """Wrapper for drivers to catch internal Exceptions and provide a helpful
    message to the user."""

    @wraps(func)
    def wrapper_analysis_error_handler(
        *args: tp.Any, **kwargs: tp.Any
    ) -> None:
        try:
            func(*args, **kwargs)
        except SetUpError as err:
            raise click.UsageError(f"Invalid analysis setup: {err}") from err
        except TableFormatError as err:
            raise click.ClickException(f"Malformed table: {err}") from err
        except FileNotFoundError as err:
            raise click.ClickException(str(err)) from err

    return wrapper_analysis_error_handler


def is_table_file(file_path: Path) -> bool:
    """Tables are csv files, everything else is read as yaml model."""
    return file_path.suffix.lower() == ".csv"
