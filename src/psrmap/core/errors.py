"""
Error taxonomy for autoload generation.

Fatal conditions are exceptions; everything that only needs reporting
(PSR violations, ambiguous classes, duplicate files) is carried as data on
the generation result instead.
"""


class AutoloadError(Exception):
    """Base class for all psrmap errors."""


class ConfigurationError(AutoloadError):
    """
    Raised when a package declares autoload rules that cannot be honoured.

    Aborts the whole generation pass.

    Attributes:
        package_name: Name of the offending package.
        message: Human-readable error message.
    """

    def __init__(self, package_name: str, message: str):
        self.package_name = package_name
        self.message = message
        super().__init__(f"Package '{package_name}': {message}")


class ScanError(AutoloadError):
    """
    Raised when a declared classmap path cannot be scanned at all.

    Attributes:
        path: The path that could not be scanned.
    """

    def __init__(self, path: str, message: str | None = None):
        self.path = path
        super().__init__(
            message
            or f'Could not scan for classes inside "{path}" which does not appear to be a file nor a folder'
        )


class SourceReadError(AutoloadError):
    """
    Raised when a source file cannot be read or processed.

    Attributes:
        path: The file that failed.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class ClassFileMissingError(SourceReadError):
    def __init__(self, path: str):
        super().__init__(path, f'File at "{path}" does not exist, check your classmap definitions')


class ClassFileUnreadableError(SourceReadError):
    def __init__(self, path: str):
        super().__init__(path, f'File at "{path}" is not readable, check its permissions')


class ClassFileCorruptError(SourceReadError):
    def __init__(self, path: str):
        super().__init__(
            path, f'File at "{path}" could not be parsed as PHP, it may be binary or corrupted'
        )


class ManifestError(AutoloadError):
    """
    Raised when a package manifest is malformed.

    Attributes:
        path: The manifest file.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to parse {path}: {message}")
