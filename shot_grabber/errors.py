class ShotGrabberError(Exception):
    """Base class for errors that abort a run."""


class NoValidUrlsError(ShotGrabberError):
    pass


class AuthenticationError(ShotGrabberError):
    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class ProtocolError(ShotGrabberError):
    """A worker or coordinator received a message it does not understand."""


class WorkerFailedError(ShotGrabberError):
    def __init__(self, worker_index: int, reason: str):
        super().__init__(f"Browser #{worker_index} failed: {reason}")
        self.worker_index = worker_index
        self.reason = reason
