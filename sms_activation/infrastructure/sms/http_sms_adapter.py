from __future__ import annotations

from typing import Optional
import httpx

from sms_activation.domain.errors import SmsDeliveryError
from sms_activation.domain.ports.sms_port import SmsPort


class HttpSmsAdapter(SmsPort):
    """Posts messages to an HTTP SMS gateway as {"to", "from", "body"} JSON."""

    def __init__(
        self,
        base_url: str,
        *,
        sender: str = "SmsActivation",
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._sender = sender
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, *, to: str, body: str) -> None:
        url = f"{self._base_url}{self._send_path}"
        payload = {"to": to, "from": self._sender, "body": body}

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise SmsDeliveryError(f"SMS gateway HTTP error: {e}") from e
        if not (200 <= resp.status_code < 300):
            raise SmsDeliveryError(
                f"SMS gateway responded {resp.status_code}: {resp.text[:200]}"
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
