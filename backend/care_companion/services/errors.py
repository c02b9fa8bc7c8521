class CareCompanionError(Exception):
    """Base class for errors raised by care companion services."""


class ExtractionError(CareCompanionError):
    """The prescription could not be turned into medicine records."""


class InteractionCheckError(CareCompanionError):
    """The interaction check could not be completed."""


class StorageError(CareCompanionError):
    """The persisted care state could not be read or written."""
