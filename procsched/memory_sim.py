"""
Decorative memory simulation.

Each process "allocates" a block of ``burst_time * BYTES_PER_UNIT`` bytes when
it is created and "frees" it the first time it completes. Nothing is really
allocated: the observer only hands out fake addresses and logs them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .models import ProcessSpec

logger = logging.getLogger(__name__)

BASE_ADDRESS = 0x10000
BYTES_PER_UNIT = 10
ALIGNMENT = 16


@dataclass
class MemoryBlock:
    pid: int
    address: int
    size: int


class MemorySimulator:
    def __init__(self, base_address: int = BASE_ADDRESS) -> None:
        self._next_address = base_address
        self._blocks: Dict[int, MemoryBlock] = {}
        self.events: List[str] = []

    @property
    def allocated(self) -> Dict[int, MemoryBlock]:
        return dict(self._blocks)

    def block_for(self, pid: int) -> Optional[MemoryBlock]:
        return self._blocks.get(pid)

    def on_process_created(self, spec: ProcessSpec) -> None:
        size = spec.burst_time * BYTES_PER_UNIT
        block = MemoryBlock(pid=spec.pid, address=self._next_address, size=size)
        self._blocks[spec.pid] = block
        # Keep fake addresses aligned like a real allocator would.
        self._next_address += -(-size // ALIGNMENT) * ALIGNMENT
        self._log(f"Allocated {size} bytes for PID {spec.pid} at address {block.address:#x}")

    def on_process_completed(self, spec: ProcessSpec, now: int) -> None:
        block = self._blocks.pop(spec.pid, None)
        if block is None:
            return
        self._log(f"Freeing memory for PID {spec.pid} from address {block.address:#x} (t={now})")

    def _log(self, message: str) -> None:
        self.events.append(message)
        logger.info("[MEMORY_SIM] %s", message)
