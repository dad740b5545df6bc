from __future__ import annotations


class OptimizerError(Exception):
    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class OracleError(OptimizerError):
    """Transport, timeout or unparsable output from a scoring or generation call."""

    def __init__(self, detail: str, status_code: int = 502) -> None:
        super().__init__(detail, status_code)


class ValidationError(OptimizerError):
    """An oracle answered, but with the wrong shape."""

    def __init__(self, detail: str, status_code: int = 422) -> None:
        super().__init__(detail, status_code)


class SessionStateError(OptimizerError):
    def __init__(self, detail: str, status_code: int = 409) -> None:
        super().__init__(detail, status_code)
