"""Abstract transport interface.

The persistence layer only needs one capability from the network: send a
request and hand back the status, headers and raw text of the response.
Implementations raise TransportError when no response was received at
all; a non-2xx response is returned normally and judged by the caller.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class TransportResponse:
    """A received HTTP response.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers (names lowercased).
        text: Raw response body.
        body: Parsed JSON body, filled in only for a JSON content type.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""
    body: Any = None

    def __post_init__(self) -> None:
        self.headers = {k.lower(): v for k, v in self.headers.items()}

    @property
    def ok(self) -> bool:
        """Only the leading digit matters: 2xx is success."""
        return self.status_code // 100 == 2

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


class Transport(ABC):
    """Abstract base class for transports.

    All transports must implement ``send``.
    """

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        body: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> TransportResponse:
        """Perform one request.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            url: Resource URL, absolute or relative to the transport's base URL.
            body: Request body text, or None for no body.
            headers: Extra request headers.

        Returns:
            The received response, whatever its status.

        Raises:
            TransportError: If the request could not be completed.
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None
