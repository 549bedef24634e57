"""
Simulated heap for MiniC programs.

Memory is one byte-addressable arena. Addresses are plain integers starting at
``HEAP_BASE``; each 8-byte slot holds a signed 64-bit little-endian value.
No bounds checks are made against individual blocks: any address inside the
arena can be read or written, so out-of-bounds and use-after-free accesses
behave like raw memory rather than raising. Only addresses below the arena base
(including NULL) or past the configured arena limit are fatal.
"""

from __future__ import annotations

import logging
import struct
from typing import Dict, List, Tuple

from .errors import SegmentationFault
from .values import SLOT_SIZE, to_value

logger = logging.getLogger(__name__)

HEAP_BASE = 0x10000
DEFAULT_HEAP_LIMIT = 64 * 1024 * 1024

_SLOT = struct.Struct("<q")


def _round_up(size: int) -> int:
    return (size + SLOT_SIZE - 1) // SLOT_SIZE * SLOT_SIZE


class Heap:
    """Arena with a bump pointer and a first-fit free list.

    Freed blocks keep their contents; a later ``allocate`` may hand the same
    block out again without clearing it unless ``zero=True`` is requested.
    """

    def __init__(self, limit: int = DEFAULT_HEAP_LIMIT, base: int = HEAP_BASE):
        self.base = base
        self.limit = limit
        self._memory = bytearray()
        self._blocks: Dict[int, int] = {}
        self._free_blocks: List[Tuple[int, int]] = []
        self._brk = base

    # ---- Allocation ---------------------------------------------------------

    def allocate(self, size: int, zero: bool = False) -> int:
        """Allocate ``size`` bytes and return the block address.

        Returns 0 (NULL) when the request is negative or cannot fit in the
        arena, mirroring a failing native allocator.
        """
        if size < 0:
            logger.debug("allocate(%d): negative size, returning NULL", size)
            return 0
        rounded = max(_round_up(size), SLOT_SIZE)

        for i, (addr, block_size) in enumerate(self._free_blocks):
            if block_size >= rounded:
                del self._free_blocks[i]
                self._blocks[addr] = block_size
                if zero:
                    self._fill(addr, block_size)
                logger.debug("allocate(%d) reused block 0x%x", size, addr)
                return addr

        addr = self._brk
        if addr + rounded - self.base > self.limit:
            logger.debug("allocate(%d): arena limit %d reached", size, self.limit)
            return 0
        self._brk += rounded
        self._ensure(addr + rounded)
        if zero:
            self._fill(addr, rounded)
        self._blocks[addr] = rounded
        logger.debug("allocate(%d) -> 0x%x", size, addr)
        return addr

    def free(self, address: int) -> bool:
        """Release a live block. Unknown addresses are ignored."""
        size = self._blocks.pop(address, None)
        if size is None:
            logger.debug("free(0x%x): not a live block, ignored", address)
            return False
        self._free_blocks.append((address, size))
        logger.debug("free(0x%x) released %d bytes", address, size)
        return True

    def block_size(self, address: int):
        return self._blocks.get(address)

    @property
    def live_blocks(self) -> Dict[int, int]:
        return dict(self._blocks)

    # ---- Slot access --------------------------------------------------------

    def read_slot(self, address: int) -> int:
        offset = self._offset(address)
        end = offset + SLOT_SIZE
        if end <= len(self._memory):
            return _SLOT.unpack_from(self._memory, offset)[0]
        # Never-written memory past the arena end reads as zero
        chunk = bytes(self._memory[offset:end]).ljust(SLOT_SIZE, b"\x00")
        return _SLOT.unpack(chunk)[0]

    def write_slot(self, address: int, value: int):
        offset = self._offset(address)
        self._ensure(address + SLOT_SIZE)
        _SLOT.pack_into(self._memory, offset, to_value(value))

    # ---- Internals ----------------------------------------------------------

    def _offset(self, address: int) -> int:
        offset = address - self.base
        if offset < 0 or offset + SLOT_SIZE > self.limit:
            raise SegmentationFault(f"Invalid memory access at address {address:#x}")
        return offset

    def _ensure(self, end_address: int):
        needed = end_address - self.base
        if needed > len(self._memory):
            self._memory.extend(b"\x00" * (needed - len(self._memory)))

    def _fill(self, address: int, size: int):
        offset = address - self.base
        self._memory[offset:offset + size] = b"\x00" * size
