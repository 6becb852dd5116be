from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Redactor:
    enabled: bool = True
    _address_map: dict[str, int] = field(default_factory=dict)
    _address_counter: int = 0

    def _number(self, address: str) -> int:
        counter = self._address_map.get(address)
        if counter is None:
            self._address_counter += 1
            counter = self._address_counter
            self._address_map[address] = counter
        return counter

    def redact_address(self, address: str) -> str:
        if not self.enabled:
            return address
        parts = address.split(":")
        if len(parts) == 6:
            prefix = ":".join(parts[:3])
            return f"{prefix}:xx:xx:{self._number(address):02d}"
        # CoreBluetooth reports per-host UUIDs instead of MAC addresses
        groups = address.split("-")
        if len(groups) == 5:
            return f"{groups[0]}-xxxx-xxxx-xxxx-{self._number(address):012d}"
        return address

    def redact_name(self, name: str) -> str:
        if not self.enabled or not name:
            return name
        first = name.split()[0]
        if first == name:
            return name
        return f"{first} ..."
