"""Base inference gateway.

All backends share the same contract:
    submit() → _call_api()   ← only this differs per backend
             → GatewayReply (text on success, GatewayError on failure)

Subclasses implement two things only:
  - __init__: store the endpoint settings
  - _call_api: make one raw request and return the generated text,
    raising GatewayFailure (or any exception) on failure

submit() never raises. It makes exactly one attempt: retry and fallback
decisions belong to the caller, which also owns the bounded timeout.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class GatewayErrorKind(str, Enum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    BAD_STATUS = "bad_status"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class GatewayError:
    kind: GatewayErrorKind
    detail: str = ""


@dataclass(frozen=True)
class GatewayReply:
    """Outcome of one inference call: exactly one of text / error is set."""

    text: str | None = None
    error: GatewayError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GatewayFailure(Exception):
    """Raised inside _call_api to report a classified failure."""

    def __init__(self, kind: GatewayErrorKind, detail: str = ""):
        super().__init__(detail or kind.value)
        self.kind = kind
        self.detail = detail


class BaseGateway(ABC):
    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    def submit(self, prompt: str) -> GatewayReply:
        """Send one prompt and return the generated text or a GatewayError.

        Concrete here because failure handling is identical for every
        backend: classified failures keep their kind, anything unexpected
        is reported as a transport error.
        """
        try:
            text = self._call_api(prompt)
        except GatewayFailure as e:
            logger.error("%s call failed (%s): %s", self.__class__.__name__, e.kind.value, e.detail)
            return GatewayReply(error=GatewayError(kind=e.kind, detail=e.detail))
        except Exception as e:
            logger.error("%s call failed unexpectedly: %s", self.__class__.__name__, e)
            return GatewayReply(error=GatewayError(kind=GatewayErrorKind.TRANSPORT, detail=str(e)))
        return GatewayReply(text=text)

    # ------------------------------------------------------------------ #
    # Abstract: implement in each backend                                  #
    # ------------------------------------------------------------------ #

    @abstractmethod
    def _call_api(self, prompt: str) -> str:
        """Make a single request and return the raw generated text.

        This is the only method subclasses must implement. It should raise
        on failure — submit() turns the exception into a GatewayError.
        """
