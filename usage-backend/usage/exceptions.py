# usage/exceptions.py
"""
Errors raised by the usage report pipeline.

Parsing gaps (a missing category header, a product line the record pattern
does not recognise) are not errors: they surface as empty categories and in
the recovery diagnostics.
"""


class UsageError(Exception):
    """Base class for usage pipeline failures surfaced to the caller"""
    pass


class ExtractionError(UsageError):
    """The uploaded bytes are not a readable PDF"""
    pass


class TransactionError(UsageError):
    """Persisting a usage report failed and was rolled back"""
    pass
