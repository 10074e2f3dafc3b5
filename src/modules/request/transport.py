from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

# Body of a request after template rendering
RequestBody = Union[Dict[str, Any], list, str, None]


class TransportConfig(BaseModel):
    timeout: float = 30  # seconds, enforced per request
    verify_ssl: bool = True
    raise_for_status: bool = True  # treat non-2xx responses as transport errors


@dataclass(frozen=True)
class TransportResponse:
    """Response returned by a transport: parsed body, headers and status."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None

    def envelope(self) -> Dict[str, Any]:
        return {"body": self.body, "headers": dict(self.headers), "status": self.status}


class Transport(ABC):
    """Sends one request and returns the response, or raises TransportError."""

    @abstractmethod
    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: RequestBody = None
    ) -> TransportResponse:
        pass

    async def close(self) -> None:
        """Release any resources held by the transport."""
        pass
