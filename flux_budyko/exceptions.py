"""
Exception types raised by the PET engine and the site pipeline.
"""

import numpy as np


class FluxBudykoError(Exception):
    """Base class for all package errors."""


class UnknownPETMethodError(FluxBudykoError, ValueError):
    """Raised when a PET method name is not registered."""

    def __init__(self, method, valid_methods):
        self.method = method
        self.valid_methods = tuple(valid_methods)
        super().__init__(
            f"Unknown PET method '{method}'. Choose from: {', '.join(self.valid_methods)}"
        )


class PETDomainError(FluxBudykoError, ValueError):
    """Raised when PET inputs fall outside the formula's domain.

    ``mask`` flags the offending records so callers can blank them and keep
    the rest of the series.
    """

    def __init__(self, message, mask=None):
        super().__init__(message)
        self.mask = None if mask is None else np.atleast_1d(np.asarray(mask, dtype=bool))


class MissingSiteError(FluxBudykoError, FileNotFoundError):
    """Raised when no daily file can be found for a roster site."""

    def __init__(self, site, data_dir):
        self.site = site
        self.data_dir = data_dir
        super().__init__(f"No daily file found for site '{site}' in {data_dir}")


class InvalidWindowError(FluxBudykoError, ValueError):
    """Raised for a non-finite or reversed validity window."""

    def __init__(self, site, start_year, end_year):
        self.site = site
        self.start_year = start_year
        self.end_year = end_year
        super().__init__(
            f"Invalid validity window for site '{site}': [{start_year}, {end_year}]"
        )


class ThornthwaiteAccuracyWarning(UserWarning):
    """Thornthwaite PET uses a placeholder day-length factor of 1.0."""
