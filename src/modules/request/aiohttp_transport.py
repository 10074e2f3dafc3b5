import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp
from multidict import CIMultiDictProxy

from .aio_client_cache import AioSessionCache
from .errors import (
    ConnectionFailedError, HttpStatusError, InvalidUrlError,
    RequestTimeoutError, SSLVerificationError, TransportError
)
from .transport import RequestBody, Transport, TransportConfig, TransportResponse
from ..logging import BaseLogger


class AiohttpTransport(Transport):
    """Transport backed by a shared aiohttp client session."""

    def __init__(
        self,
        config: TransportConfig,
        logger: BaseLogger,
        session_cache: Optional[AioSessionCache] = None,
    ):
        """Initialize the transport.
        
        Args:
            config: Timeout, SSL and status handling settings
            logger: Logger instance for debug output
            session_cache: Optional session cache, created from the config if omitted
        """
        self.config = config
        self.logger = logger
        self.session_cache = session_cache or AioSessionCache(timeout=config.timeout)

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: RequestBody = None
    ) -> TransportResponse:
        """Send a request and return the parsed response.
        
        Raises:
            RequestTimeoutError: If the request exceeds the configured timeout
            SSLVerificationError: If SSL verification fails
            ConnectionFailedError: If the host cannot be reached
            InvalidUrlError: If the URL cannot be parsed
            HttpStatusError: If raise_for_status is set and the status is not 2xx
            TransportError: For any other client failure
        """
        client = await self.session_cache.get_session()
        kwargs: Dict[str, Any] = {"headers": headers or None, "ssl": self.config.verify_ssl}
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif body is not None:
            kwargs["data"] = body

        try:
            async with client.request(method, url, **kwargs) as response:
                raw = await response.read()
                status = response.status
                response_headers = self._collect_headers(response.headers)
                charset = response.charset
        except asyncio.TimeoutError as err:
            raise RequestTimeoutError(f"Request timed out after {self.config.timeout}s") from err
        except aiohttp.ClientSSLError as err:
            raise SSLVerificationError(f"SSL verification failed: {str(err)}") from err
        except aiohttp.ClientConnectorError as err:
            raise ConnectionFailedError(f"Connection error: {str(err)}") from err
        except aiohttp.InvalidURL as err:
            raise InvalidUrlError(f"Invalid URL: {str(err)}") from err
        except aiohttp.ClientError as err:
            raise TransportError(f"Client error: {str(err)}") from err
        except ValueError as err:
            # aiohttp rejects header values with newlines before sending
            raise TransportError(f"Invalid request: {str(err)}") from err

        parsed = self._parse_body(self._decode(raw, charset))
        if self.config.raise_for_status and not 200 <= status < 300:
            raise HttpStatusError(status, parsed)

        return TransportResponse(status=status, headers=response_headers, body=parsed)

    @staticmethod
    def _collect_headers(headers: CIMultiDictProxy[str]) -> Dict[str, str]:
        """Flatten response headers, joining repeated ones such as Set-Cookie."""
        collected: Dict[str, str] = {}
        seen = set()
        for key in headers.keys():
            if key.lower() not in seen:
                seen.add(key.lower())
                collected[key] = ", ".join(headers.getall(key))
        return collected

    @staticmethod
    def _decode(raw: bytes, charset: Optional[str]) -> str:
        try:
            return raw.decode(charset or "utf-8", errors="replace")
        except LookupError:
            return raw.decode("utf-8", errors="replace")

    @staticmethod
    def _parse_body(text: str) -> Any:
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return text

    async def close(self) -> None:
        """Close the client session cache."""
        await self.session_cache.close()
