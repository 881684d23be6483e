from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ConfirmationContext:
    """
    Request-scoped flags for one confirmation operation. Never persisted.

    Create one per request and pass it through every call that belongs to
    that request; reusing it keeps `raw_token` warm so repeated dispatches
    send the same token.
    """

    bypass_postpone_once: bool = False
    reconfirmation_pending: bool = False
    suppress_notification: bool = False
    raw_token: str | None = None

    def skip_confirmation_notification(self) -> None:
        """No SMS is sent for the create/update hooks of this request."""
        self.suppress_notification = True

    def skip_reconfirmation_postpone_once(self) -> None:
        """The next phone change is applied right away, without reconfirmation."""
        self.bypass_postpone_once = True
