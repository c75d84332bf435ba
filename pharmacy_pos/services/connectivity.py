from typing import Optional
import httpx
import logging

logger = logging.getLogger(__name__)


class ConnectivityProbe:
    """
    Single bounded reachability check against a well-known host.
    Any error or timeout counts as offline; no retries.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def is_online(self) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self.transport,
                follow_redirects=True
            ) as client:
                response = await client.head(self.url)
            return response.is_success
        except (httpx.HTTPError, OSError) as e:
            logger.debug(f"Connectivity check to {self.url} failed: {str(e)}")
            return False
