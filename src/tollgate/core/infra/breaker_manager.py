"""Runs calls through a per-service circuit breaker on a worker pool.

Work is handed to a ``ContextAwareExecutor``, so the submitting caller's user
and tenant are installed on the worker for the call and cleared afterwards.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, TypeVar

from tollgate.core.config.loader import ClientSettings, load_settings
from tollgate.core.context.propagation import ContextAwareExecutor
from tollgate.core.http.errors import TollgateError

from .breaker import CircuitBreaker

T = TypeVar("T")

logger = logging.getLogger("tollgate.infra.breaker")


class ServiceDegradedError(TollgateError):
    def __init__(self, service: str, last_error: str | None = None) -> None:
        self.service = service
        self.last_error = last_error
        suffix = f": {last_error}" if last_error else ""
        super().__init__(f"service_degraded:{service}{suffix}")


class ServiceTimeoutError(TollgateError):
    def __init__(self, service: str, timeout_s: float) -> None:
        self.service = service
        self.timeout_s = timeout_s
        super().__init__(f"service_timeout:{service}:{timeout_s}s")


class BreakerManager:
    def __init__(self, settings: ClientSettings | None = None, executor: ContextAwareExecutor | None = None) -> None:
        self.settings = settings or load_settings()
        self.enabled = self.settings.breakers_enabled
        self._executor = executor or ContextAwareExecutor(
            max_workers=self.settings.breaker_max_workers,
            thread_name_prefix="tollgate-breaker",
        )
        self._breakers: dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def get(self, service: str) -> CircuitBreaker:
        with self._lock:
            if service not in self._breakers:
                self._breakers[service] = CircuitBreaker(
                    service=service,
                    failure_threshold=self.settings.breaker_failure_threshold,
                    open_seconds=self.settings.breaker_open_seconds,
                    half_open_max_trials=self.settings.breaker_half_open_max_trials,
                )
            return self._breakers[service]

    def snapshot(self) -> dict[str, dict[str, object]]:
        with self._lock:
            return {name: breaker.to_dict() for name, breaker in self._breakers.items()}

    def wrap(self, service: str, fn: Callable[[], T]) -> T:
        if not self.enabled:
            return self._run(service, fn)

        breaker = self.get(service)
        with self._lock:
            previous_state = breaker.state
            allowed = breaker.allow_request()
            current_state = breaker.state
        self._record_transition_if_needed(service, previous_state, current_state, "cooldown elapsed")
        if not allowed:
            raise ServiceDegradedError(service, breaker.last_error)

        try:
            result = self._run(service, fn)
        except Exception as exc:
            with self._lock:
                transition = breaker.record_failure(str(exc))
                failure_count = breaker.failure_count
            if transition is not None:
                self._record_transition(service, transition[0], transition[1], str(exc))
            else:
                logger.info(
                    "Breaker failure recorded for %s",
                    service,
                    extra={"extra_fields": {"service": service, "failure_count": failure_count, "reason": str(exc)}},
                )
            raise

        with self._lock:
            transition = breaker.record_success()
        if transition is not None:
            self._record_transition(service, transition[0], transition[1], "request succeeded")
        return result

    def _run(self, service: str, fn: Callable[[], T]) -> T:
        future = self._executor.submit(fn)
        try:
            return future.result(timeout=self.settings.breaker_timeout_s)
        except FutureTimeoutError as exc:
            future.cancel()
            raise ServiceTimeoutError(service, self.settings.breaker_timeout_s) from exc

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _record_transition_if_needed(self, service: str, previous: str, current: str, reason: str) -> None:
        if previous != current:
            self._record_transition(service, previous, current, reason)

    def _record_transition(self, service: str, from_state: str, to_state: str, reason: str) -> None:
        logger.warning(
            "Circuit breaker %s transitioned %s->%s",
            service,
            from_state,
            to_state,
            extra={"extra_fields": {"service": service, "from_state": from_state, "to_state": to_state, "reason": reason}},
        )
