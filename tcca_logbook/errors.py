"""
Logbook engine exceptions.

Only programmer-error conditions are raised: a malformed input shape or an
invalid configuration. Domain problems with a flight (negative hours,
cross-country time above its base, future dates...) are reported as
validation issues or derivation warnings instead.
"""


class LogbookError(Exception):
    """Base exception for logbook engine errors."""

    def __init__(self, message, code='LOGBOOK_ERROR', details=None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        """Convert exception to a dictionary for callers that serialise it."""
        return {
            'error': self.code,
            'message': self.message,
            'details': self.details,
        }


class InvalidEntryError(LogbookError, ValueError):
    """Raised when a quick-entry input breaks its contract."""

    def __init__(self, message, field=None, details=None):
        error_details = details or {}
        if field:
            error_details['field'] = field
        super().__init__(message, code='INVALID_ENTRY', details=error_details)


class UnknownBucketFieldError(LogbookError, KeyError):
    """Raised when a bucket key outside the fixed column set is supplied."""

    def __init__(self, field):
        super().__init__(
            f"Unknown bucket field: {field}",
            code='UNKNOWN_BUCKET_FIELD',
            details={'field': field},
        )

    def __str__(self):
        return self.message


class MalformedFlightError(LogbookError, ValueError):
    """Raised when a flight record is missing a required input key."""

    def __init__(self, field, row_number=None):
        msg = f"Flight record is missing required field '{field}'"
        if row_number is not None:
            msg += f" (row {row_number})"
        super().__init__(
            msg,
            code='MALFORMED_FLIGHT',
            details={'field': field, 'row_number': row_number},
        )


class ConfigurationError(LogbookError, ValueError):
    """Raised for invalid engine configuration, e.g. a zero page size."""

    def __init__(self, message, setting=None):
        super().__init__(
            message,
            code='CONFIGURATION_ERROR',
            details={'setting': setting} if setting else None,
        )


class TotalsMismatchError(LogbookError, AssertionError):
    """Raised when paginated totals disagree with the aggregation engine."""

    def __init__(self, mismatches):
        fields = ', '.join(sorted(mismatches))
        super().__init__(
            f"Totals to date disagree with grand totals for: {fields}",
            code='TOTALS_MISMATCH',
            details={'mismatches': mismatches},
        )
