from __future__ import annotations


class EmbeddedPostgresError(Exception):
    """
    Base class for every error raised by embedded_postgres.
    """

    pass


class FetchError(EmbeddedPostgresError):
    """
    The postgres binary archive could not be downloaded.
    """

    pass


class ExtractError(EmbeddedPostgresError):
    """
    The postgres binary archive could not be unpacked.
    """

    pass


class InitError(EmbeddedPostgresError):
    """
    initdb failed to create the data directory.
    """

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(message)
        self.command = command


class PortUnavailableError(EmbeddedPostgresError):
    """
    Something is already listening on the configured port.
    """

    def __init__(self, port: int):
        super().__init__(f"process already listening on port {port}")
        self.port = port


class PgCtlError(EmbeddedPostgresError):
    """
    An error occurred while running pg_ctl.
    """

    def __init__(self, message: str, command: list[str] | None = None):
        super().__init__(message)
        self.command = command


class StartError(PgCtlError):
    pass


class StopError(PgCtlError):
    pass


class NotStartedError(EmbeddedPostgresError):
    def __init__(self, message: str = "server has not been started"):
        super().__init__(message)


class AlreadyStartedError(EmbeddedPostgresError):
    def __init__(self, message: str = "server is already started"):
        super().__init__(message)


class CreateDatabaseError(EmbeddedPostgresError):
    """
    CREATE DATABASE failed against the running server.

    When the server could not be stopped afterwards, ``stop_error`` holds
    the error raised by the stop attempt.
    """

    def __init__(self, message: str, stop_error: Exception | None = None):
        super().__init__(message)
        self.stop_error = stop_error
