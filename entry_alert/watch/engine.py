"""
Adaptive watcher: one polling loop per subscription.

Lifecycle:
    Polling -> (Alerting -> Stopped) | Stopped

Each watcher is a single asyncio task that polls, decides, then sleeps for an
interval picked from the game state. The next sleep only starts once the poll
has finished, so slow provider responses throttle the loop instead of stacking
polls. Fetch and notification send are bounded by timeouts.

Alert rule: rising edge (not in game on the previous successful poll, in game
now) AND cooldown elapsed since the last delivered alert.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable, Optional

from entry_alert.alerting import build_entry_alert, channel_for, send_notification
from entry_alert.errors import NotifierError, ProviderError
from entry_alert.providers.base import DataProvider
from entry_alert.telemetry import record_notifier_failure, record_watch_alert, record_watch_poll
from entry_alert.telemetry.sentry import capture_exception
from entry_alert.watch.detector import EntryStatus, detect_entry, simulated_status

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str, str], Awaitable[None]]


@dataclass(frozen=True)
class PollIntervals:
    """Seconds between polls per game phase."""

    fast: float = 5.0    # in progress
    slow: float = 30.0   # scheduled, delayed, warmup, unknown; also after errors
    final: float = 60.0  # any "final" label

    @classmethod
    def from_settings(cls, settings) -> "PollIntervals":
        return cls(
            fast=settings.WATCH_POLL_FAST_SECONDS,
            slow=settings.WATCH_POLL_SLOW_SECONDS,
            final=settings.WATCH_POLL_FINAL_SECONDS,
        )

    def for_state(self, state: Optional[str]) -> float:
        label = (state or "").lower()
        if "progress" in label:
            return self.fast
        if "final" in label:
            return self.final
        return self.slow


@dataclass
class Subscription:
    """Watcher state. Identity fields are fixed at creation."""

    id: str
    player_name: str
    team: str
    game_pk: str
    simulate: bool = False
    notify_to: Optional[str] = None
    cooldown_seconds: float = 300
    stop_after_alert: bool = True
    target_date: Optional[date] = None
    created_at: float = field(default_factory=time.time)

    # Mutated by the owning watcher only
    last_in_game: bool = False
    last_alert_at: float = 0.0
    stopped: bool = False
    polls: int = 0
    alerts_sent: int = 0
    last_game_state: Optional[str] = None
    last_error: Optional[str] = None

    def summary(self) -> dict:
        return {
            "id": self.id,
            "playerName": self.player_name,
            "team": self.team,
            "gamePk": self.game_pk,
            "simulate": self.simulate,
            "notifyTo": self.notify_to,
            "cooldownSec": self.cooldown_seconds,
            "stopAfterAlert": self.stop_after_alert,
            "targetDate": self.target_date.isoformat() if self.target_date else None,
            "lastInGame": self.last_in_game,
            "lastAlertAt": self.last_alert_at,
            "polls": self.polls,
            "alertsSent": self.alerts_sent,
            "lastGameState": self.last_game_state,
            "lastError": self.last_error,
            "createdAt": self.created_at,
        }


class Watcher:
    """Polling loop for one subscription."""

    def __init__(
        self,
        subscription: Subscription,
        provider: DataProvider,
        intervals: PollIntervals = PollIntervals(),
        notifier: Notifier = send_notification,
        on_stop: Optional[Callable[[str], bool]] = None,
        clock: Callable[[], float] = time.time,
        fetch_timeout: float = 20.0,
        notify_timeout: float = 20.0,
    ):
        self.subscription = subscription
        self.provider = provider
        self.intervals = intervals
        self.notifier = notifier
        self.clock = clock
        self.fetch_timeout = fetch_timeout
        self.notify_timeout = notify_timeout
        # Registry hook so an auto-stop also removes the subscription from the registry
        self._on_stop = on_stop
        self._task: Optional[asyncio.Task] = None

    @property
    def stopped(self) -> bool:
        return self.subscription.stopped

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def start(self) -> None:
        """Schedule the first poll immediately."""
        if self._task is not None or self.stopped:
            return
        self._task = asyncio.create_task(self._run(), name=f"watch-{self.subscription.id}")

    def stop(self) -> bool:
        """Stop polling. Returns False if already stopped."""
        if self.subscription.stopped:
            return False
        self.subscription.stopped = True
        task = self._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        return True

    async def _run(self) -> None:
        sub = self.subscription
        logger.info(f"[WATCH] {sub.id}: watching {sub.player_name!r} in gamePk {sub.game_pk}")
        try:
            while not sub.stopped:
                delay = await self.poll_once()
                if delay is None or sub.stopped:
                    break
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.debug(f"[WATCH] {sub.id}: cancelled")
            raise
        finally:
            logger.info(f"[WATCH] {sub.id}: stopped after {sub.polls} polls, {sub.alerts_sent} alerts")

    async def _fetch_status(self) -> EntryStatus:
        sub = self.subscription
        if sub.simulate:
            return simulated_status(sub.player_name)
        snapshot = await self.provider.snapshot(sub.game_pk)
        return detect_entry(snapshot, sub.player_name)

    async def poll_once(self) -> Optional[float]:
        """
        Run one poll and apply the alert rule.

        Returns:
            Seconds until the next poll, or None when the watcher is done.
        """
        sub = self.subscription
        try:
            status = await asyncio.wait_for(self._fetch_status(), timeout=self.fetch_timeout)
        except ProviderError as e:
            return self._poll_failed("provider_error", f"Provider error: {e}")
        except asyncio.TimeoutError:
            return self._poll_failed("timeout", f"Fetch timed out after {self.fetch_timeout}s")
        except Exception as e:
            logger.error(f"[WATCH] {sub.id}: unexpected poll error: {e}", exc_info=True)
            capture_exception(e, subscription_id=sub.id, game_pk=sub.game_pk)
            return self._poll_failed("error", f"{type(e).__name__}: {e}")

        # stop() may have landed while the fetch was in flight
        if sub.stopped:
            return None

        record_watch_poll("ok")
        sub.polls += 1
        sub.last_game_state = status.raw_game_state
        sub.last_error = None
        interval = self.intervals.for_state(status.raw_game_state)

        if not sub.last_in_game and status.in_game:
            now = self.clock()
            if now - sub.last_alert_at >= sub.cooldown_seconds:
                delivered = await self._alert(status)
                if delivered:
                    sub.last_alert_at = now
                    sub.alerts_sent += 1
                sub.last_in_game = True
                if sub.stop_after_alert:
                    self._finish()
                    return None
            else:
                remaining = sub.cooldown_seconds - (now - sub.last_alert_at)
                logger.info(f"[WATCH] {sub.id}: entry detected but cooldown active ({remaining:.0f}s left)")

        sub.last_in_game = status.in_game
        if sub.stopped:
            return None
        return interval

    def _poll_failed(self, outcome: str, message: str) -> Optional[float]:
        sub = self.subscription
        record_watch_poll(outcome)
        sub.last_error = message
        logger.warning(f"[WATCH] {sub.id}: {message}; retrying in {self.intervals.slow}s")
        if sub.stopped:
            return None
        return self.intervals.slow

    async def _alert(self, status: EntryStatus) -> bool:
        """Send the entry notification. Returns False only when delivery failed."""
        sub = self.subscription
        subject, body = build_entry_alert(sub.team, sub.player_name, sub.game_pk, status)

        if not sub.notify_to:
            record_watch_alert("none")
            logger.info(f"[WATCH] {sub.id}: {subject} (no notify destination)")
            return True

        channel = channel_for(sub.notify_to)
        try:
            await asyncio.wait_for(
                self.notifier(sub.notify_to, subject, body), timeout=self.notify_timeout
            )
        except NotifierError as e:
            logger.error(f"[WATCH] {sub.id}: notification to {channel} failed: {e}")
            return False
        except asyncio.TimeoutError:
            record_notifier_failure(channel)
            logger.error(f"[WATCH] {sub.id}: notification to {channel} timed out after {self.notify_timeout}s")
            return False
        except Exception as e:
            record_notifier_failure(channel)
            logger.error(f"[WATCH] {sub.id}: notification to {channel} crashed: {e}", exc_info=True)
            return False

        record_watch_alert(channel)
        logger.info(f"[WATCH] {sub.id}: {subject} (sent via {channel})")
        return True

    def _finish(self) -> None:
        if self._on_stop is not None:
            self._on_stop(self.subscription.id)
        # Covers the registry hook having already dropped this watcher
        self.stop()
