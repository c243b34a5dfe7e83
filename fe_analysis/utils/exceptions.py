"""This module contains custom exceptions."""


class SetUpError(Exception):
    """Raised if the analysis cannot be set up, e.g., because of missing or
    contradicting configuration values."""


class FormulaParseError(ValueError):
    """Raised if a formula string could not be parsed."""


class TableFormatError(Exception):
    """Raised if an input table does not have the expected columns."""
