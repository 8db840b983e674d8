import logging
import traceback


class LocationHierarchyError(Exception):
    """Base class for location hierarchy errors."""


class NormalizationFailure(LocationHierarchyError):
    """Raised when a geocoder result carries no address components at all."""


class StoreWriteError(LocationHierarchyError):
    """Raised by a term store when a create or parent update cannot be written."""


class SlugConflictError(StoreWriteError):
    """Raised when a term with the requested slug was committed by someone else first."""

    def __init__(self, slug: str):
        super().__init__(f"Term slug already exists: {slug}")
        self.slug = slug


def custom_exception_hook(exc_type, exc_value, tb):
    full_traceback = "".join(traceback.format_exception(exc_type, exc_value, tb))
    first_line = f"{exc_type.__name__}: {exc_value}"
    short_message = f"{exc_type.__name__}"

    # Log full traceback silently
    logging.error(full_traceback)

    # Also log just the first line for quick visibility
    logging.error(f"First line: {first_line}")

    return short_message
