"""Exception taxonomy for AutoClock. Every error is terminal for the run."""

from typing import Optional


class ClockError(Exception):
    """Base class. ``stage`` is filled in by the runner when the error escapes a pipeline stage."""

    stage: Optional[str] = None


class BadHeaderLen(ClockError):
    def __init__(self, value: str):
        super().__init__(f"Session id too short ({len(value)} chars): {value!r}")
        self.value = value


class NoHeader(ClockError):
    def __init__(self):
        super().__init__("Portal response carried no Set-Cookie header")


class LoginFailure(ClockError):
    def __init__(self, body_len: int):
        super().__init__(f"Login rejected (response body {body_len} chars)")
        self.body_len = body_len


class ActionFailure(ClockError):
    def __init__(self, submitted, observed, body: str):
        super().__init__(
            f"Portal did not apply {submitted}: response reflects {observed} (body {len(body)} chars)"
        )
        self.submitted = submitted
        self.observed = observed
        self.body = body
        self.body_len = len(body)


class NoOperator(ClockError):
    def __init__(self, value: Optional[str] = None):
        if value is None:
            msg = "Missing operator, expected 'on' or 'off'"
        else:
            msg = f"Unknown operator {value!r}, expected 'on' or 'off'"
        super().__init__(msg)
        self.value = value


class NoActionToTake(ClockError):
    def __init__(self, status, want_active: bool):
        direction = "on" if want_active else "off"
        super().__init__(f"No legal action for '{direction}' while {status.label}")
        self.status = status
        self.want_active = want_active


class BadStatus(ClockError):
    pass


class ResponseUnparsable(ClockError):
    pass


class MarkupError(ResponseUnparsable):
    """Markup broke a structural assumption (e.g. unpaired caption/enabled lines)."""


class TransportError(ClockError):
    pass
