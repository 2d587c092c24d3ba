# tebak_bot/riddle/errors.py

import enum
import json
from typing import Optional

import openai


class JudgeErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    NETWORK = "network"
    MALFORMED = "malformed"
    UNKNOWN = "unknown"


USER_MESSAGES = {
    JudgeErrorKind.NOT_FOUND: "The AI model wasn't found (404). Someone needs to fix my config.",
    JudgeErrorKind.UNAUTHORIZED: "My API key was rejected. Ask an admin to check it.",
    JudgeErrorKind.RATE_LIMITED: "I've hit my AI quota (rate limit). Give me a minute and try again.",
    JudgeErrorKind.NETWORK: "I couldn't reach the AI. Connection trouble, try again.",
    JudgeErrorKind.MALFORMED: "The AI sent back garbage. Try again.",
    JudgeErrorKind.UNKNOWN: "Something unexpected went wrong with the AI.",
}


class JudgeError(Exception):
    """A classified failure of the remote AI collaborator."""

    def __init__(self, kind: JudgeErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES[self.kind]


class RiddleGenerationError(JudgeError):
    pass


class MalformedResponse(ValueError):
    """Raised while parsing an LLM reply that isn't the JSON we asked for."""


class SubmissionBusy(Exception):
    """An answer arrived while the previous one is still being judged."""


def classify_error(exc: BaseException) -> JudgeErrorKind:
    # Order matters: the status errors are APIError subclasses too
    if isinstance(exc, openai.NotFoundError):
        return JudgeErrorKind.NOT_FOUND
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return JudgeErrorKind.UNAUTHORIZED
    if isinstance(exc, openai.RateLimitError):
        return JudgeErrorKind.RATE_LIMITED
    if isinstance(exc, openai.APIConnectionError):
        return JudgeErrorKind.NETWORK
    if isinstance(exc, (json.JSONDecodeError, MalformedResponse)):
        return JudgeErrorKind.MALFORMED
    return JudgeErrorKind.UNKNOWN


def wrap_error(exc: BaseException, error_cls: Optional[type] = None) -> JudgeError:
    if isinstance(exc, JudgeError):
        return exc
    cls = error_cls or JudgeError
    return cls(classify_error(exc), repr(exc))
