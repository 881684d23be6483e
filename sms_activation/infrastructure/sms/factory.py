from __future__ import annotations

from sms_activation.domain.ports.sms_port import SmsPort
from sms_activation.infrastructure.sms.http_sms_adapter import HttpSmsAdapter
from sms_activation.infrastructure.sms.logging_sms_adapter import LoggingSmsAdapter


def build_sms_adapter(backend: str, *, base_url: str, sender: str) -> SmsPort:
    backend = (backend or "http").strip().lower()
    if backend == "console":
        return LoggingSmsAdapter()
    if backend == "http":
        return HttpSmsAdapter(base_url=base_url, sender=sender)
    raise ValueError(f"unknown SMS backend: {backend}")
