class BridgeError(Exception):
    """Base for errors that map straight onto an HTTP response."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class JobNotFound(BridgeError):
    status_code = 404

    def __init__(self, job_id: str):
        super().__init__("Job not found")
        self.job_id = job_id


class InvalidJobState(BridgeError):
    status_code = 400

    def __init__(self, job_id: str, current: str):
        super().__init__(f"Job is already {current}, cannot execute.")
        self.job_id = job_id
        self.current = current


class PayoutConfigError(BridgeError):
    status_code = 500
