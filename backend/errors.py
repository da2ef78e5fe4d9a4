"""Exception hierarchy for receptor comparisons.

Every error raised by the engine derives from ComparisonError and carries
the HTTP status the service answers with.
"""
from typing import Any, Dict, Optional


class ComparisonError(Exception):
    """Base exception for all comparison errors"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(ComparisonError):
    """Unknown gene symbol"""
    status_code = 404


class ClassMismatchError(ComparisonError):
    """Receptors belong to different classes"""
    status_code = 400


class SequenceMissingError(ComparisonError):
    """Catalog lists a receptor the class alignment does not contain"""
    status_code = 404


class MalformedRecordError(ComparisonError):
    """Conservation table row has the wrong shape"""
    status_code = 422


class AlignmentLengthError(ComparisonError):
    """Aligned sequences of one comparison differ in length"""
    status_code = 422


class InvalidSequenceError(ComparisonError):
    """Aligned sequence uses characters outside A-Z and '-'"""
    status_code = 422


class InvalidThresholdError(ComparisonError):
    status_code = 422


class DataFileMissingError(ComparisonError):
    """Alignment or conservation file referenced by the catalog is absent"""
    pass
