"""Request/reply exchange over a message channel."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any

from .channel_protocols import MessageChannel

logger = logging.getLogger(__name__)

_SUBSCRIBE_READY_CHECK_SECONDS = 0.01


def exchange_request_reply(
    channel: MessageChannel,
    *,
    request_destination: str,
    request_body: Any,
    reply_destination: str,
    reply_timeout_ms: int,
) -> Any:
    """Publish a request and return the first reply seen on the reply destination.

    The subscribe runs on a worker thread and the request is published only after
    the channel reported the subscription as established, so a responder that
    answers immediately is not missed.

    The worker is a daemon thread. When publishing fails the pending subscribe
    is abandoned: it runs out on its own timeout and does not hold up process exit.

    Raises:
      ReplyTimeoutError: If no reply arrives within `reply_timeout_ms`.
      ChannelTransportError: If publishing or consuming fails.
    """
    subscribed = threading.Event()
    reply_future: Future[Any] = Future()

    def _await_reply() -> None:
        reply_future.set_running_or_notify_cancel()
        try:
            reply = channel.subscribe(
                reply_destination, reply_timeout_ms, on_subscribed=subscribed.set
            )
        except BaseException as exc:
            reply_future.set_exception(exc)
        else:
            reply_future.set_result(reply)

    threading.Thread(target=_await_reply, name="reply-subscriber", daemon=True).start()
    while not subscribed.wait(_SUBSCRIBE_READY_CHECK_SECONDS):
        if reply_future.done():
            # Subscribe ended before it was established; nothing is published.
            return reply_future.result()

    logger.debug("publishing request to %s", request_destination)
    channel.publish(request_destination, request_body)
    reply = reply_future.result()
    logger.debug("received reply on %s", reply_destination)
    return reply
