class SrpmBuilderError(Exception):
    pass


class ConfigError(SrpmBuilderError):
    pass


class EnvironmentCheckError(SrpmBuilderError):
    pass


class RuntimeUnavailableError(EnvironmentCheckError):
    pass


class ImageNotFoundError(EnvironmentCheckError):
    pass


class SourceError(SrpmBuilderError):
    pass


class SourceNotFoundError(SourceError):
    pass


class SourceIsDirectoryError(SourceError):
    pass


class DownloadError(SourceError):
    pass


class ChecksumMismatchError(SourceError):
    pass


class OutputDirectoryError(SrpmBuilderError):
    pass


class BuildFailedError(SrpmBuilderError):
    pass
