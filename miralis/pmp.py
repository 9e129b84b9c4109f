"""Physical memory protection: PMP entry groups, their layout and iteration."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from .segment import USIZE_MAX, Segment, build_napot, build_tor

logger = logging.getLogger(__name__)

NB_PMPADDR = 64
NB_PMPCFG = 8

# ——————————————————————————— pmpcfg bits ——————————————————————————— #

CFG_R = 0b00000001
"""Read access."""
CFG_W = 0b00000010
"""Write access."""
CFG_X = 0b00000100
"""Execute access."""
CFG_RWX = CFG_R | CFG_W | CFG_X
CFG_NO_PERMISSIONS = 0x0

CFG_TOR = 0b00001000
"""Address is top of range."""
CFG_NA4 = 0b00010000
"""Naturally aligned four-byte region."""
CFG_NAPOT = 0b00011000
"""Naturally aligned power-of-two region."""
CFG_A_MASK = 0b00011000
"""Mask of the address-matching mode."""

CFG_L = 0b10000000
"""Lock bit."""

CFG_INACTIVE = 0b00000000
"""An inactive entry, ignored by the matching rules."""

CFG_VALID_BITS = CFG_RWX | CFG_NAPOT | CFG_L


def _trailing_ones(value: int) -> int:
    return (value ^ (value + 1)).bit_length() - 1


# ——————————————————————————— Layout ——————————————————————————— #


@dataclass(frozen=True)
class Device:
    """A virtual device whose memory must be protected from the firmware."""

    name: str
    start_addr: int
    size: int


@dataclass(frozen=True)
class PmpLayout:
    """Placement of the monitor's own PMP entries ahead of the virtual PMPs.

    In order: one entry protecting the monitor, one per virtual device, the
    entries claimed by modules, one for MPRV emulation, a null entry so the
    first virtual TOR entry sees 0 as its lower bound, then the virtual PMPs.
    The last physical entry grants or denies access to all memory.
    """

    nb_virt_devices: int = 0
    module_size: int = 0

    MIRALIS_OFFSET = 0
    MIRALIS_SIZE = 1
    MPRV_EMULATION_SIZE = 1
    INACTIVE_ENTRY_SIZE = 1

    def __post_init__(self) -> None:
        if self.nb_virt_devices < 0 or self.module_size < 0:
            raise ValueError("layout sizes must not be negative")

    def devices_offset(self) -> int:
        """First entry protecting virtual devices."""
        return self.MIRALIS_OFFSET + self.MIRALIS_SIZE

    def module_offset(self) -> int:
        """First entry reserved for modules."""
        return self.devices_offset() + self.nb_virt_devices

    def mprv_emulation_offset(self) -> int:
        """Entry used to emulate the MPRV bit."""
        return self.module_offset() + self.module_size

    def inactive_entry_offset(self) -> int:
        """Null entry placed before the virtual PMPs."""
        return self.mprv_emulation_offset() + self.MPRV_EMULATION_SIZE

    def virtual_pmp_offset(self) -> int:
        """First entry available to the virtual PMPs."""
        return self.inactive_entry_offset() + self.INACTIVE_ENTRY_SIZE

    def total_pmp(self) -> int:
        """Number of entries the monitor needs for itself, last entry included."""
        return self.virtual_pmp_offset() + 1


# ——————————————————————————— PMP group ——————————————————————————— #


class PmpGroup:
    """A set of pmpaddr and pmpcfg register values."""

    def __init__(self, nb_pmp: int, layout: PmpLayout | None = None) -> None:
        if not 0 <= nb_pmp <= NB_PMPADDR:
            raise ValueError(f"invalid number of PMP registers: {nb_pmp}")
        self._pmpaddr = [0] * NB_PMPADDR
        self._pmpcfg = [0] * NB_PMPCFG
        self.nb_pmp = nb_pmp
        self.layout = layout if layout is not None else PmpLayout()
        self.nb_virt_pmp = 0
        self.virt_pmp_offset = 0

    @property
    def pmpaddr(self) -> tuple[int, ...]:
        """The pmpaddr register values."""
        return tuple(self._pmpaddr)

    @property
    def pmpcfg(self) -> tuple[int, ...]:
        """The pmpcfg register values, eight entries per register."""
        return tuple(self._pmpcfg)

    def set_entry(self, idx: int, addr: int, cfg: int) -> None:
        """Set a pmpaddr and its configuration; invalid config bits are dropped."""
        cfg &= CFG_VALID_BITS
        if cfg & CFG_L:
            raise ValueError("Lock bit not yet supported on PMPs")
        if not 0 <= idx < NB_PMPADDR:
            raise IndexError(f"invalid PMP index: {idx}")
        self._pmpaddr[idx] = addr & USIZE_MAX
        self.set_pmpcfg(idx, cfg)

    def set_napot(self, idx: int, start: int, size: int, permissions: int) -> None:
        """Set a NAPOT entry covering ``[start, start + size)``."""
        if not 0 <= permissions < 8:
            raise ValueError("Permissions should not set NAPOT or TOR bits")
        addr = build_napot(start, size)
        if addr is None:
            raise ValueError(f"invalid NAPOT region: start={start:#x} size={size:#x}")
        self.set_entry(idx, addr, permissions | CFG_NAPOT)

    def set_tor(self, idx: int, until: int, permissions: int) -> None:
        """Set a TOR entry ending at ``until``."""
        if not 0 <= permissions < 8:
            raise ValueError("Permissions should not set NAPOT or TOR bits")
        self.set_entry(idx, build_tor(until), permissions | CFG_TOR)

    def set_inactive(self, idx: int, addr: int) -> None:
        """Set an inactive entry whose address bounds the next TOR entry."""
        self.set_entry(idx, build_tor(addr), CFG_INACTIVE)

    def set_from_policy(self, idx: int, addr: int, cfg: int) -> None:
        """Set one of the entries reserved for modules, numbered from 0."""
        if not 0 <= idx < self.layout.module_size:
            raise IndexError(
                f"Policy isn't writing to its pmp entries index: {idx} "
                f"number of registers: {self.layout.module_size}"
            )
        self.set_entry(self.layout.module_offset() + idx, addr, cfg)

    def set_pmpcfg(self, index: int, cfg: int) -> None:
        """Set the 8-bit configuration of entry ``index``."""
        if not 0 <= cfg <= 0xFF:
            raise ValueError(f"invalid PMP configuration: {cfg:#x}")
        if not 0 <= index < NB_PMPADDR:
            raise IndexError(f"invalid PMP index: {index}")
        reg_idx, inner_idx = divmod(index, 8)
        shift = inner_idx * 8
        self._pmpcfg[reg_idx] = (self._pmpcfg[reg_idx] & ~(0xFF << shift)) | (cfg << shift)

    def get_pmpcfg(self, index: int) -> int:
        """Return the 8-bit configuration of entry ``index``."""
        if not 0 <= index < NB_PMPADDR:
            raise IndexError(f"invalid PMP index: {index}")
        reg_idx, inner_idx = divmod(index, 8)
        return (self._pmpcfg[reg_idx] >> (inner_idx * 8)) & 0xFF

    def load_with_offset(
        self,
        pmpaddr: Sequence[int],
        pmpcfg: Sequence[int],
        offset: int,
        nb_pmp: int,
    ) -> None:
        """Copy ``nb_pmp`` entries into this group starting at ``offset``.

        Lock bits are removed from the imported configurations.
        """
        if offset < 0 or nb_pmp < 0 or offset + nb_pmp > NB_PMPADDR:
            raise IndexError("PMP entries out of range")
        if nb_pmp > len(pmpaddr) or nb_pmp > len(pmpcfg) * 8:
            raise IndexError("not enough source PMP registers")
        self._pmpaddr[offset : offset + nb_pmp] = [a & USIZE_MAX for a in pmpaddr[:nb_pmp]]
        for idx in range(nb_pmp):
            reg_idx, inner_idx = divmod(idx, 8)
            cfg = (pmpcfg[reg_idx] >> (inner_idx * 8)) & 0x7F
            self.set_pmpcfg(idx + offset, cfg)

    def set_range_rwx(self, start: int, nb_pmp: int) -> None:
        """Grant RWX to ``nb_pmp`` entries starting at ``start``."""
        for idx in range(start, start + nb_pmp):
            self.set_pmpcfg(idx, self.get_pmpcfg(idx) | CFG_RWX)

    def __iter__(self) -> Iterator[tuple[Segment, int]]:
        """Yield the memory segment and permissions of each active entry."""
        prev_addr = 0
        for idx in range(self.nb_pmp):
            cfg = self.get_pmpcfg(idx)
            addr = self._pmpaddr[idx]
            lower = prev_addr
            prev_addr = addr
            mode = cfg & CFG_A_MASK
            if mode == CFG_NA4:
                yield Segment((addr << 2) & USIZE_MAX, 4), cfg & CFG_RWX
            elif mode == CFG_NAPOT:
                ones = _trailing_ones(addr)
                base = ((addr & ~((1 << ones) - 1)) << 2) & USIZE_MAX
                yield Segment(base, 1 << (ones + 3)), cfg & CFG_RWX
            elif mode == CFG_TOR:
                if lower >= addr:
                    continue
                yield Segment(lower, addr - lower), cfg & CFG_RWX

    def __str__(self) -> str:
        lines = []
        prev_addr = 0
        for i in range(self.nb_pmp):
            addr = self._pmpaddr[i]
            cfg = self.get_pmpcfg(i)
            r = "R" if cfg & 0b001 else "_"
            w = "W" if cfg & 0b010 else "_"
            x = "X" if cfg & 0b100 else "_"
            lock = "L" if cfg & 0b10000000 else " "
            a = (cfg >> 3) & 0b11
            mode = ("OFF", "TOR", "NA4", "NAPOT")[a]
            shifted = (addr << 2) & USIZE_MAX
            if a == 0:
                prev_addr = shifted
                start, end = shifted, 0
            elif a == 1:
                start, end = prev_addr, shifted
                prev_addr = shifted
            elif a == 2:
                prev_addr = shifted
                start, end = addr, addr + 4
            else:
                ones = _trailing_ones(addr)
                if ones > 62:
                    start, end = 0, USIZE_MAX
                else:
                    start = ((addr & ~((1 << ones) - 1)) << 2) & USIZE_MAX
                    prev_addr = start
                    end = min(start + (1 << (ones + 3)), USIZE_MAX)
            lines.append(f"\nPMP {i:2}  {start:16x} {end:16x} | {r}{w}{x}{lock} {mode}")
        return "".join(lines)


def init_pmp_group(
    nb_pmp: int,
    start: int,
    size: int,
    devices: Sequence[Device] = (),
    layout: PmpLayout | None = None,
    max_virt_pmp: int | None = None,
) -> PmpGroup:
    """Build the initial PMP configuration protecting the monitor and devices.

    ``start`` and ``size`` describe the monitor's memory. With fewer than 8
    PMP registers no entry is configured and no virtual PMP is available.
    """
    if layout is None:
        layout = PmpLayout(nb_virt_devices=len(devices))
    if len(devices) > layout.nb_virt_devices:
        raise ValueError("more devices than PMP entries reserved for them")

    pmp = PmpGroup(nb_pmp, layout)
    if pmp.nb_pmp >= 8:
        remaining = pmp.nb_pmp - layout.total_pmp()
        if remaining < 0:
            raise ValueError("not enough PMP registers for the layout")

        # This entry can be activated to catch all memory accesses
        pmp.set_inactive(layout.mprv_emulation_offset(), 0)

        pmp.set_napot(layout.MIRALIS_OFFSET, start, size, CFG_NO_PERMISSIONS)

        for i, device in enumerate(devices):
            logger.debug(
                "PMP protect device %s at [0x%x, 0x%x]",
                device.name,
                device.start_addr,
                device.start_addr + device.size,
            )
            pmp.set_napot(
                layout.devices_offset() + i,
                device.start_addr,
                device.size,
                CFG_NO_PERMISSIONS,
            )

        for idx in range(layout.module_size):
            pmp.set_inactive(layout.module_offset() + idx, 0)

        # The next PMP sees 0 as its TOR lower bound
        pmp.set_inactive(layout.inactive_entry_offset(), 0)

        # The last entry grants access to the whole memory
        pmp.set_napot(pmp.nb_pmp - 1, 0, USIZE_MAX, CFG_RWX)

        if max_virt_pmp is not None:
            pmp.nb_virt_pmp = min(remaining, max_virt_pmp)
        else:
            pmp.nb_virt_pmp = remaining
    else:
        pmp.nb_virt_pmp = 0

    pmp.virt_pmp_offset = layout.virtual_pmp_offset()
    return pmp