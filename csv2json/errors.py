class Csv2JsonError(Exception):
    """Base class for every error the converter raises on purpose."""


class InvalidArgumentsError(Csv2JsonError):
    pass


class InvalidInputError(Csv2JsonError):
    """Input file cannot be read or has no header line. Ends the run."""


class OutputWriteError(Csv2JsonError):
    """Output file cannot be created or written. Ends the run."""


class MalformedRowError(ValueError):
    """A data line whose field count does not match the header count."""


class SerializerStateError(RuntimeError):
    pass


class PipelineAborted(Csv2JsonError):
    """Raised on one side of the hand-off channel when the other side failed."""
