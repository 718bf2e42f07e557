"""
Error taxonomy for the anagram MapReduce pipeline
"""


class PipelineError(Exception):
    """Base class for all pipeline failures"""


class ConfigurationError(PipelineError):
    """Raised when the pipeline configuration is invalid or incomplete"""


class SourceUnavailable(PipelineError):
    """Input text, stop-word list or mapper output cannot be opened"""

    def __init__(self, path, reason: str = ''):
        self.path = str(path)
        self.reason = reason
        message = f"Source unavailable: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class BucketUnavailable(PipelineError):
    """A bucket's intermediate file is unreadable or its report cannot be written"""

    def __init__(self, partition_id: int, path, reason: str = ''):
        self.partition_id = partition_id
        self.path = str(path)
        self.reason = reason
        message = f"Bucket {partition_id} unavailable: {self.path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class MalformedRecord(PipelineError):
    """A record line lacks the '<signature>: <token>' shape"""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Malformed record line: {line!r}")
