"""HTTP delivery of enriched events to the collection endpoint."""

from __future__ import annotations

import functools
import typing as typ

import httpx
import msgspec

from obol.delivery.dispatcher import BoundedDispatcher
from obol.observability import CaptureEventLogger

if typ.TYPE_CHECKING:
    from obol.capture.models import ErrorEvent
    from obol.config import CaptureConfig

_JSON_HEADERS = {"Content-Type": "application/json"}

# Opaque payload values msgspec cannot encode natively are sent as their repr.
_encoder = msgspec.json.Encoder(enc_hook=repr)


def encode_event(event: ErrorEvent) -> bytes:
    """Serialize an event to its JSON wire payload.

    Raises
    ------
    msgspec.EncodeError
        If the payload cannot be encoded even with the ``repr`` fallback.

    """
    return _encoder.encode(event)


class DeliveryClient:
    """Ship events with a single fire-and-forget POST each.

    ``deliver`` serializes on the calling thread and hands the send to a
    ``BoundedDispatcher``. The response is closed unread and its status is
    never inspected. Failed sends are logged and discarded; nothing is
    retried, queued, or persisted.

    Parameters
    ----------
    config
        Capture configuration providing the endpoint and timeout.
    http_client
        Optional ``httpx.Client`` for testing. If not provided, the instance
        creates and owns its own client with the configured timeout.
    dispatcher
        Optional dispatcher. Defaults to one bounded by
        ``config.max_in_flight``.

    Examples
    --------
    >>> client = DeliveryClient(CaptureConfig())
    >>> client.deliver(event)  # returns before the POST completes
    >>> client.close()

    """

    def __init__(
        self,
        config: CaptureConfig,
        *,
        http_client: httpx.Client | None = None,
        dispatcher: BoundedDispatcher | None = None,
        event_logger: CaptureEventLogger | None = None,
    ) -> None:
        """Initialise the client and its dispatcher."""
        self._endpoint = config.endpoint
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            timeout=httpx.Timeout(config.timeout_s),
            headers={"User-Agent": config.user_agent},
        )
        self._dispatcher = dispatcher or BoundedDispatcher(config.max_in_flight)
        self._event_logger = event_logger or CaptureEventLogger()

    def _send(self, body: bytes) -> None:
        try:
            with self._client.stream(
                "POST", self._endpoint, content=body, headers=_JSON_HEADERS
            ):
                pass
        except Exception as exc:  # noqa: BLE001 - delivery is best effort
            self._event_logger.log_delivery_failed(endpoint=self._endpoint, error=exc)

    def deliver(self, event: ErrorEvent) -> None:
        """Dispatch ``event`` to the endpoint without waiting for the result."""
        try:
            body = encode_event(event)
        except (msgspec.EncodeError, TypeError, ValueError, OverflowError):
            self._event_logger.log_dropped(
                fingerprint=event.fingerprint, reason="unserializable"
            )
            return

        if not self._dispatcher.submit(functools.partial(self._send, body)):
            self._event_logger.log_dropped(
                fingerprint=event.fingerprint, reason="saturated"
            )
            return

        self._event_logger.log_dispatched(
            fingerprint=event.fingerprint, endpoint=self._endpoint
        )

    def close(self) -> None:
        """Release the dispatcher and, when owned, the HTTP client."""
        self._dispatcher.close()
        if self._owns_client:
            self._client.close()
