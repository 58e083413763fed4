"""Process-wide subscription registry."""

import asyncio
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from entry_alert.alerting import send_notification
from entry_alert.providers.base import DataProvider
from entry_alert.telemetry import set_active_subscriptions
from entry_alert.watch.engine import Notifier, PollIntervals, Subscription, Watcher
from entry_alert.watch.resolver import EventResolver

logger = logging.getLogger(__name__)


@dataclass
class WatchRequest:
    """Parameters for a new subscription. None means "use the configured default"."""

    player_name: str
    team: str
    target_date: Optional[date] = None
    game_pk: Optional[str] = None
    simulate: bool = False
    notify_to: Optional[str] = None
    cooldown_seconds: Optional[float] = None
    stop_after_alert: Optional[bool] = None


class SubscriptionRegistry:
    """
    In-memory id -> watcher map.

    Membership is guarded by a lock so request handlers can create/stop/list
    while watcher tasks fire. Ids come from a counter and are never reused.
    """

    def __init__(
        self,
        provider: DataProvider,
        resolver: EventResolver,
        intervals: PollIntervals = PollIntervals(),
        notifier: Notifier = send_notification,
        default_cooldown_seconds: float = 300,
        default_stop_after_alert: bool = True,
        fetch_timeout: float = 20.0,
        notify_timeout: float = 20.0,
        clock: Callable[[], float] = time.time,
    ):
        self.provider = provider
        self.resolver = resolver
        self.intervals = intervals
        self.notifier = notifier
        self.default_cooldown_seconds = default_cooldown_seconds
        self.default_stop_after_alert = default_stop_after_alert
        self.fetch_timeout = fetch_timeout
        self.notify_timeout = notify_timeout
        self.clock = clock
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._watchers: dict[str, Watcher] = {}

    @classmethod
    def from_settings(cls, settings, provider: DataProvider, **kwargs) -> "SubscriptionRegistry":
        resolver = EventResolver(
            provider, season=settings.MLB_SEASON, window_days=settings.RESOLVER_SEARCH_DAYS
        )
        return cls(
            provider,
            resolver,
            intervals=PollIntervals.from_settings(settings),
            default_cooldown_seconds=settings.WATCH_DEFAULT_COOLDOWN_SECONDS,
            default_stop_after_alert=settings.WATCH_DEFAULT_STOP_AFTER_ALERT,
            fetch_timeout=settings.WATCH_FETCH_TIMEOUT_SECONDS,
            notify_timeout=settings.WATCH_NOTIFY_TIMEOUT_SECONDS,
            **kwargs,
        )

    async def create(self, request: WatchRequest) -> Subscription:
        """
        Resolve the game and start a watcher.

        Nothing is registered if resolution fails; ResolutionError,
        NoEventFoundError and ProviderError propagate to the caller.
        """
        if not request.player_name or not request.player_name.strip():
            raise ValueError("playerName is required")

        game_pk = await self.resolver.resolve(
            request.team,
            target=request.target_date,
            game_pk=request.game_pk,
            simulate=request.simulate,
        )

        cooldown = request.cooldown_seconds
        if cooldown is None:
            cooldown = self.default_cooldown_seconds
        stop_after_alert = request.stop_after_alert
        if stop_after_alert is None:
            stop_after_alert = self.default_stop_after_alert

        with self._lock:
            subscription = Subscription(
                id=str(next(self._ids)),
                player_name=request.player_name.strip(),
                team=request.team,
                game_pk=game_pk,
                simulate=request.simulate,
                notify_to=request.notify_to or None,
                cooldown_seconds=max(0, cooldown),
                stop_after_alert=stop_after_alert,
                target_date=request.target_date,
            )
            watcher = Watcher(
                subscription,
                self.provider,
                intervals=self.intervals,
                notifier=self.notifier,
                on_stop=self.stop,
                clock=self.clock,
                fetch_timeout=self.fetch_timeout,
                notify_timeout=self.notify_timeout,
            )
            self._watchers[subscription.id] = watcher
            set_active_subscriptions(len(self._watchers))

        watcher.start()
        logger.info(
            f"[REGISTRY] Created {subscription.id}: player={subscription.player_name!r} "
            f"gamePk={game_pk} simulate={subscription.simulate}"
        )
        return subscription

    def stop(self, subscription_id: str) -> bool:
        """Stop and remove a subscription. False for unknown or already-stopped ids."""
        with self._lock:
            watcher = self._watchers.pop(str(subscription_id), None)
            set_active_subscriptions(len(self._watchers))
        if watcher is None:
            return False
        watcher.stop()
        logger.info(f"[REGISTRY] Stopped {subscription_id}")
        return True

    def get(self, subscription_id: str) -> Optional[Subscription]:
        with self._lock:
            watcher = self._watchers.get(str(subscription_id))
        return watcher.subscription if watcher else None

    def list_all(self) -> list[dict]:
        """Summaries of registered subscriptions (no task handles)."""
        with self._lock:
            watchers = list(self._watchers.values())
        return [w.subscription.summary() for w in watchers]

    def __len__(self) -> int:
        with self._lock:
            return len(self._watchers)

    async def shutdown(self) -> int:
        """Stop every watcher and wait for their tasks to unwind."""
        with self._lock:
            watchers = list(self._watchers.values())
            self._watchers.clear()
            set_active_subscriptions(0)

        tasks = []
        for watcher in watchers:
            watcher.stop()
            if watcher.task is not None:
                tasks.append(watcher.task)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        if watchers:
            logger.info(f"[REGISTRY] Shutdown stopped {len(watchers)} watchers")
        return len(watchers)
