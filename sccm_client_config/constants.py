"""Fixed SCCM client identifiers: WMI coordinates, maintenance cycles, inventory layout."""
from __future__ import annotations

import os
import socket
from enum import Enum
from typing import Dict, Tuple


CCM_NAMESPACE = r"root\ccm"
SMS_CLIENT_CLASS = "SMS_Client"
SET_PROVISIONING_MODE_METHOD = "SetClientProvisioningMode"
TRIGGER_SCHEDULE_METHOD = "TriggerSchedule"

SYSTEM_DRIVE = "C:"
BYTES_PER_GB = 1024**3

INVENTORY_FIELDS: Tuple[str, ...] = (
    "SerialNumber",
    "BIOSVersion",
    "Domain",
    "IPAddress",
    "MACAddress",
    "OSVersion",
    "DiskCapacity",
    "DiskFreeSpace",
)


def _parse_member(enum_cls, value, kind: str):
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    allowed = ", ".join(member.value for member in enum_cls)
    raise ValueError(f"Invalid {kind} '{value}'. Expected one of: {allowed}")


class ProvisioningAction(Enum):
    START = "Start"
    STOP = "Stop"

    @classmethod
    def parse(cls, value: "ProvisioningAction | str") -> "ProvisioningAction":
        return _parse_member(cls, value, "provisioning action")

    @property
    def enabled(self) -> bool:
        return _PROVISIONING_FLAGS[self]


_PROVISIONING_FLAGS: Dict[ProvisioningAction, bool] = {
    ProvisioningAction.START: True,
    ProvisioningAction.STOP: False,
}


class ClientTask(Enum):
    HARDWARE_INVENTORY = "HardwareInventoryCycle"
    SOFTWARE_INVENTORY = "SoftwareInventoryCycle"
    DISCOVERY_DATA_COLLECTION = "DiscoveryDataCollectionCycle"
    FILE_COLLECTION = "FileCollectionCycle"
    MACHINE_POLICY_RETRIEVAL = "MachinePolicyRetrievalCycle"
    MACHINE_POLICY_EVALUATION = "MachinePolicyEvaluationCycle"
    USER_POLICY_RETRIEVAL = "UserPolicyRetrievalCycle"
    USER_POLICY_EVALUATION = "UserPolicyEvaluationCycle"
    SOFTWARE_METERING_USAGE_REPORT = "SoftwareMeteringUsageReportCycle"
    WINDOWS_INSTALLER_SOURCE_LIST_UPDATE = "WindowsInstallerSourceListUpdateCycle"
    SOFTWARE_UPDATES_ASSIGNMENTS_EVALUATION = "SoftwareUpdatesAssignmentsEvaluationCycle"
    SOFTWARE_UPDATES_SCAN = "SoftwareUpdatesScanCycle"
    APPLICATION_DEPLOYMENT_EVALUATION = "ApplicationDeploymentEvaluationCycle"

    @classmethod
    def parse(cls, value: "ClientTask | str") -> "ClientTask":
        return _parse_member(cls, value, "task name")

    @property
    def schedule_id(self) -> str:
        return SCHEDULE_IDS[self]


# Schedule tokens documented for the Configuration Manager client.
SCHEDULE_IDS: Dict[ClientTask, str] = {
    ClientTask.HARDWARE_INVENTORY: "{00000000-0000-0000-0000-000000000001}",
    ClientTask.SOFTWARE_INVENTORY: "{00000000-0000-0000-0000-000000000002}",
    ClientTask.DISCOVERY_DATA_COLLECTION: "{00000000-0000-0000-0000-000000000003}",
    ClientTask.FILE_COLLECTION: "{00000000-0000-0000-0000-000000000010}",
    ClientTask.MACHINE_POLICY_RETRIEVAL: "{00000000-0000-0000-0000-000000000021}",
    ClientTask.MACHINE_POLICY_EVALUATION: "{00000000-0000-0000-0000-000000000022}",
    ClientTask.USER_POLICY_RETRIEVAL: "{00000000-0000-0000-0000-000000000026}",
    ClientTask.USER_POLICY_EVALUATION: "{00000000-0000-0000-0000-000000000027}",
    ClientTask.SOFTWARE_METERING_USAGE_REPORT: "{00000000-0000-0000-0000-000000000031}",
    ClientTask.WINDOWS_INSTALLER_SOURCE_LIST_UPDATE: "{00000000-0000-0000-0000-000000000032}",
    ClientTask.SOFTWARE_UPDATES_ASSIGNMENTS_EVALUATION: "{00000000-0000-0000-0000-000000000108}",
    ClientTask.SOFTWARE_UPDATES_SCAN: "{00000000-0000-0000-0000-000000000113}",
    ClientTask.APPLICATION_DEPLOYMENT_EVALUATION: "{00000000-0000-0000-0000-000000000121}",
}

_missing = set(ClientTask) - set(SCHEDULE_IDS)
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"Schedule identifiers missing for: {sorted(task.value for task in _missing)}")

TASK_NAMES: Tuple[str, ...] = tuple(task.value for task in ClientTask)


def default_computer_name() -> str:
    return os.environ.get("COMPUTERNAME") or socket.gethostname()
