class ConversionError(RuntimeError):
    """Raised when input data is inconsistent and the run must stop."""


class DatasetError(ConversionError):
    """Raised when a dataset file cannot be opened or indexed."""


class PairFileError(ConversionError):
    """Raised when a pairing file line cannot be parsed."""


class LabelMismatchError(ConversionError):
    """Raised when a pairing file label disagrees with the dataset label."""


class RecordShapeError(ConversionError):
    """Raised when two samples cannot be merged into one record."""


class SizeCheckError(ConversionError):
    """Raised when a record's data size differs from the first record's."""


class BackendUnavailable(RuntimeError):
    """Raised when a requested key-value backend cannot run in this environment."""


class StoreError(RuntimeError):
    """Raised when a key-value store is used outside its open/close lifecycle."""
