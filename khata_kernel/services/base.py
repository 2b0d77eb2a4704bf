"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and command contract for every
    service that mutates the store. Services receive the KhataStore plus
    an injected Clock and IdGenerator; tests pass deterministic ones.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Every service in ``khata_kernel/services/`` that performs write
    operations extends this class.

Invariants enforced:
    - All-or-nothing: a command builds the complete successor state and
      commits it with exactly one ``store.commit`` call at the end. Any
      exception raised before that leaves the store untouched.

Audit relevance:
    Commands run inside ``_command``, which binds the actor and command
    name (plus the target record id, when there is one) into the log
    context and logs every rejected command at WARNING before re-raising.
"""

from __future__ import annotations

import logging
from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager

from khata_kernel.domain.clock import Clock, SystemClock
from khata_kernel.domain.records import Actor
from khata_kernel.exceptions import KhataKernelError
from khata_kernel.logging_config import LogContext, get_logger
from khata_kernel.services.store import KhataStore
from khata_kernel.utils.ids import IdGenerator, SystemIdGenerator


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Reads ``store.state``, never edits it in place, and commits one
        successor state per successful command.

    Non-goals:
        - Does NOT provide query-only (read) methods -- those belong
          in ``khata_kernel/selectors/``.
    """

    _logger: logging.Logger = get_logger("services")

    def __init__(
        self,
        store: KhataStore,
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
    ):
        self.store = store
        self._clock = clock or SystemClock()
        self._ids = ids or SystemIdGenerator()

    @contextmanager
    def _command(
        self,
        name: str,
        actor: Actor | None,
        record_id: str | None = None,
    ) -> Iterator[None]:
        actor_id = actor.user_id if actor is not None else None
        with LogContext.bind(command=name, actor_id=actor_id, record_id=record_id):
            try:
                yield
            except KhataKernelError as exc:
                self._logger.warning(
                    "command_rejected",
                    extra={"error_code": exc.code, "reason": str(exc)},
                )
                raise
