# Exceptions raised by the packaging tools.
import contextlib

import util.path


class PackagingError(Exception):
    """Base class of all errors reported by the packaging tools."""


class FileOperationError(PackagingError):
    """
    A filesystem operation failed.
    The original OSError is available as __cause__.
    """

    def __init__(self, operation, path, cause):
        super().__init__(operation, path, cause)
        self.operation = operation
        self.path = path
        self.cause = cause

    def __str__(self):
        return f"Failed to {self.operation} {util.path.format_path(self.path)}: {self.cause}"


@contextlib.contextmanager
def file_operation(operation, path):
    """
    Context manager translating any OSError raised in its body
    into a FileOperationError for the given operation and path.
    """
    try:
        yield
    except OSError as e:
        raise FileOperationError(operation, path, e) from e


class TagSyntaxError(PackagingError):
    """
    Malformed use of solution and stub tags in a source file.

    Attributes:
    * line_number: 1-based number of the offending line.
    * line: the offending line (decoded for display).
    * path: the parsed file, or None if not known.
    """

    description = "malformed tag"

    def __init__(self, line_number, line, path=None):
        super().__init__(line_number, line, path)
        self.line_number = line_number
        self.line = line
        self.path = path

    def with_path(self, path):
        return type(self)(self.line_number, self.line, path)

    def __str__(self):
        location = f"line {self.line_number}"
        if self.path is not None:
            location = f"{util.path.format_path(self.path)}, {location}"
        return f"{location}: {self.description}: {self.line.strip()}"


class UnbalancedTagError(TagSyntaxError):
    description = "unbalanced BEGIN/END tag"


class MisplacedTagError(TagSyntaxError):
    description = "SOLUTION FILE must be the first tag in the file"


class InvalidParamError(PackagingError):
    def __init__(self, value):
        super().__init__(value)
        self.value = value

    def __str__(self):
        return f"Invalid parameter value: {self.value!r}"


class NoProjectRootError(PackagingError):
    def __init__(self, path):
        super().__init__(path)
        self.path = path

    def __str__(self):
        return f"No project directory found in archive {util.path.format_path(self.path)}"


class PluginNotFoundError(PackagingError):
    def __init__(self, path):
        super().__init__(path)
        self.path = path

    def __str__(self):
        return f"No matching plugin found for {util.path.format_path(self.path)}"


class ArchiveFormatError(PackagingError):
    def __init__(self, path, reason):
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def __str__(self):
        return f"Unreadable archive {util.path.format_path(self.path)}: {self.reason}"


class ConfigParseError(PackagingError):
    def __init__(self, path, reason):
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def __str__(self):
        return f"Invalid project configuration {util.path.format_path(self.path)}: {self.reason}"
