"""SCCM client provisioning mode toggle."""
from __future__ import annotations

import logging

from sccm_client_config.constants import (
    CCM_NAMESPACE,
    SET_PROVISIONING_MODE_METHOD,
    SMS_CLIENT_CLASS,
    ProvisioningAction,
    default_computer_name,
)
from services.remoting import ManagementTransport, PowerShellTransport, cim_method_script, validate_computer_name

logger = logging.getLogger(__name__)


def provisioning_script(action: ProvisioningAction) -> str:
    flag = "$true" if action.enabled else "$false"
    return cim_method_script(CCM_NAMESPACE, SMS_CLIENT_CLASS, SET_PROVISIONING_MODE_METHOD, {"bEnable": flag})


class ProvisioningModeService:
    def __init__(self, transport: ManagementTransport | None = None) -> None:
        self._transport = transport or PowerShellTransport()

    def set_mode(self, action: ProvisioningAction | str, computer_name: str | None = None) -> None:
        """Start or stop provisioning mode on one client; remote failures raise RemoteCommandError."""
        parsed = ProvisioningAction.parse(action)
        target = validate_computer_name(computer_name or default_computer_name())
        logger.info("%s provisioning mode on %s", parsed.value, target)
        self._transport.run_script(target, provisioning_script(parsed)).check()
