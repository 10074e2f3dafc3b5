import asyncio
from typing import Optional
import aiohttp
from aiohttp import ClientTimeout

class AioSessionCache:
    """Keeps a single aiohttp session alive for the lifetime of a run."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self.client_session: Optional[aiohttp.ClientSession] = None
        self._lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        # Concurrent first requests of a wave must not each open a session
        async with self._lock:
            if self.client_session is None or self.client_session.closed:
                self.client_session = aiohttp.ClientSession(timeout=ClientTimeout(total=self.timeout))
            return self.client_session
    
    async def close(self):
        if self.client_session:
            await self.client_session.close()
            self.client_session = None
