class AnalysisError(Exception):
    """Base class for errors raised by the analysis engine"""


class DataUnavailableError(AnalysisError):
    """The requested log could not be provided. Expected and recoverable."""

    def __init__(self, message, cause=None):
        super().__init__(message)
        self.cause = cause


class LogNotFoundError(DataUnavailableError):
    pass


class InvalidLogError(DataUnavailableError):
    pass


class InvalidConfigError(AnalysisError):
    """The module set or its static data is invalid; the run can't proceed"""


class CyclicDependencyError(InvalidConfigError):
    def __init__(self, names):
        self.names = list(names)
        super().__init__(
            "Cyclic dependency between analyzers: " + ", ".join(self.names)
        )


class HandlerFailure:
    def __init__(self, analyzer_name, event, exception):
        self.analyzer_name = analyzer_name
        self.timestamp = event.timestamp if event is not None else None
        self.event_type = event.type if event is not None else None
        self.exception = exception

    def __repr__(self):
        return (
            f"HandlerFailure({self.analyzer_name!r}, {self.event_type!r} "
            f"@ {self.timestamp}, {self.exception!r})"
        )
