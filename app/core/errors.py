"""Error raised at the API boundary and rendered into the response envelope."""


class ApiError(Exception):
    """Raised by routes and dependencies; app exception handler turns it into {success: false, error}."""

    def __init__(self, status_code: int, error: str) -> None:
        self.status_code = status_code
        self.error = error
        super().__init__(error)
