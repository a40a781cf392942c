class IngestError(ValueError):
    """This is the base exception which all the other exceptions derive from.
    It is a subclass of ValueError.
    """


class MalformedHeaderError(IngestError):
    """Error raised when the end of the input is reached before the header/data boundary was found."""


class MissingVerticalCoordinateError(IngestError):
    """Error raised when profile mode is requested but there is no usable ``DEPTH`` or ``PRES_REL`` column."""


class DataTableError(IngestError):
    """Error raised when the data rows cannot be tokenized into columns matching the header."""
