"""Remote hardware and OS inventory for SCCM-managed computers."""
from __future__ import annotations

import ipaddress
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from sccm_client_config.constants import BYTES_PER_GB, INVENTORY_FIELDS, SYSTEM_DRIVE, default_computer_name
from services.remoting import ManagementTransport, PowerShellTransport, quote_ps, validate_computer_name

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("SerialNumber", "BIOSVersion", "Domain", "OSVersion", "DiskSize", "DiskFreeSpace")


class InventoryDataError(ValueError):
    pass


@dataclass(frozen=True)
class ComputerInfo:
    serial_number: str
    bios_version: str
    domain: str
    ip_address: str | None
    mac_addresses: tuple[str, ...]
    os_version: str
    disk_capacity_gb: int
    disk_free_space_gb: int

    def to_record(self) -> dict[str, str]:
        values = (
            self.serial_number,
            self.bios_version,
            self.domain,
            self.ip_address or "",
            ", ".join(self.mac_addresses),
            self.os_version,
            f"{self.disk_capacity_gb}GB",
            f"{self.disk_free_space_gb}GB",
        )
        return dict(zip(INVENTORY_FIELDS, values))


@dataclass
class InventoryResult:
    computer_name: str
    info: ComputerInfo | None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.info is not None


def inventory_script(drive: str = SYSTEM_DRIVE) -> str:
    drive_filter = quote_ps(f"DeviceID='{drive}'")
    return f"""$bios = Get-CimInstance -ClassName Win32_BIOS
$system = Get-CimInstance -ClassName Win32_ComputerSystem
$adapters = @(Get-CimInstance -ClassName Win32_NetworkAdapterConfiguration | Where-Object {{ $_.IPAddress }})
$os = Get-CimInstance -ClassName Win32_OperatingSystem
$disk = Get-CimInstance -ClassName Win32_LogicalDisk -Filter {drive_filter}
[pscustomobject]@{{
    SerialNumber = $bios.SerialNumber
    BIOSVersion = $bios.SMBIOSBIOSVersion
    Domain = $system.Domain
    IPAddresses = @($adapters | ForEach-Object {{ $_.IPAddress }})
    MACAddresses = @($adapters | ForEach-Object {{ $_.MACAddress }})
    OSVersion = $os.Version
    DiskSize = $disk.Size
    DiskFreeSpace = $disk.FreeSpace
}} | ConvertTo-Json -Compress -Depth 3"""


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if item]
    text = str(value).strip()
    return [text] if text else []


def _first_ipv4(addresses: Iterable[str]) -> str | None:
    for address in addresses:
        try:
            parsed = ipaddress.ip_address(address)
        except ValueError:
            continue
        if parsed.version == 4:
            return address
    return None


def _bytes_to_gb(value: Any, key: str) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError) as exc:
        raise InventoryDataError(f"{key} is not a byte count: {value!r}") from exc
    if size < 0:
        raise InventoryDataError(f"{key} is negative: {size}")
    return size // BYTES_PER_GB


def parse_inventory(output: str) -> ComputerInfo:
    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        raise InventoryDataError("Inventory script returned no output")
    try:
        data = json.loads(lines[-1])
    except json.JSONDecodeError as exc:
        raise InventoryDataError(f"Inventory output is not JSON: {lines[-1][:200]}") from exc
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    if not isinstance(data, dict):
        raise InventoryDataError("Inventory output is not a single object")
    missing = [key for key in _REQUIRED_KEYS if data.get(key) in (None, "")]
    if missing:
        raise InventoryDataError(f"Inventory output missing {', '.join(missing)}")

    return ComputerInfo(
        serial_number=str(data["SerialNumber"]).strip(),
        bios_version=str(data["BIOSVersion"]).strip(),
        domain=str(data["Domain"]).strip(),
        ip_address=_first_ipv4(_as_list(data.get("IPAddresses"))),
        mac_addresses=tuple(_as_list(data.get("MACAddresses"))),
        os_version=str(data["OSVersion"]).strip(),
        disk_capacity_gb=_bytes_to_gb(data["DiskSize"], "DiskSize"),
        disk_free_space_gb=_bytes_to_gb(data["DiskFreeSpace"], "DiskFreeSpace"),
    )


class ComputerInfoService:
    def __init__(self, transport: ManagementTransport | None = None, *, drive: str = SYSTEM_DRIVE) -> None:
        self._transport = transport or PowerShellTransport()
        self._drive = drive

    def query(self, computer_name: str | None = None) -> ComputerInfo:
        target = validate_computer_name(computer_name or default_computer_name())
        logger.info("Collecting inventory from %s", target)
        result = self._transport.run_script(target, inventory_script(self._drive)).check()
        return parse_inventory(result.stdout)

    def query_many(
        self,
        computer_names: Iterable[str] | None = None,
        *,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> list[InventoryResult]:
        """Query each host in order; a failing host is reported, never padded with placeholder values."""
        targets = [name for name in (computer_names or []) if name and name.strip()]
        if not targets:
            targets = [default_computer_name()]
        results: list[InventoryResult] = []
        total = len(targets)
        for index, name in enumerate(targets, start=1):
            try:
                results.append(InventoryResult(name, self.query(name)))
            except Exception as exc:
                logger.warning("Inventory failed for %s: %s", name, exc)
                results.append(InventoryResult(name, None, str(exc)))
            if progress_callback:
                progress_callback(index, total, name)
        return results
