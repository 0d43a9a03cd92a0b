"""streams push-stream core, operators and scheduling."""

from streams import operators
from streams.broadcaster import Broadcaster, DispatchError
from streams.observability import NullLogger, Observability, StdlibLogger
from streams.observer import CallbackObserver, Observer, to_observer
from streams.scheduling import (
    RealTimeScheduler,
    Scheduler,
    get_default_scheduler,
    set_default_scheduler,
    use_scheduler,
)
from streams.stream import Operator, Producer, Stream
from streams.subscriber import Subscriber, SubscriberState, SubscriptionRuntimeError
from streams.subscription import Subscription, TeardownError

__all__ = [
    "operators",
    "Broadcaster",
    "DispatchError",
    "NullLogger",
    "Observability",
    "StdlibLogger",
    "CallbackObserver",
    "Observer",
    "to_observer",
    "RealTimeScheduler",
    "Scheduler",
    "get_default_scheduler",
    "set_default_scheduler",
    "use_scheduler",
    "Operator",
    "Producer",
    "Stream",
    "Subscriber",
    "SubscriberState",
    "SubscriptionRuntimeError",
    "Subscription",
    "TeardownError",
]
