"""Trigger built-in SCCM client maintenance cycles by schedule identifier."""
from __future__ import annotations

import logging
from typing import Iterable

from sccm_client_config.constants import (
    CCM_NAMESPACE,
    SMS_CLIENT_CLASS,
    TRIGGER_SCHEDULE_METHOD,
    ClientTask,
    default_computer_name,
)
from services.remoting import (
    ManagementTransport,
    PowerShellTransport,
    cim_method_script,
    quote_ps,
    validate_computer_name,
)

logger = logging.getLogger(__name__)


def trigger_script(task: ClientTask) -> str:
    return cim_method_script(
        CCM_NAMESPACE,
        SMS_CLIENT_CLASS,
        TRIGGER_SCHEDULE_METHOD,
        {"sScheduleID": quote_ps(task.schedule_id)},
    )


class ClientTaskService:
    def __init__(self, transport: ManagementTransport | None = None) -> None:
        self._transport = transport or PowerShellTransport()

    def trigger(self, task: ClientTask | str, computer_name: str | None = None) -> None:
        parsed = ClientTask.parse(task)
        target = validate_computer_name(computer_name or default_computer_name())
        logger.info("Triggering %s (%s) on %s", parsed.value, parsed.schedule_id, target)
        self._transport.run_script(target, trigger_script(parsed)).check()

    def trigger_many(self, tasks: Iterable[ClientTask | str], computer_name: str | None = None) -> None:
        # Validate every name before the first remote call.
        parsed = [ClientTask.parse(task) for task in tasks]
        for task in parsed:
            self.trigger(task, computer_name)
