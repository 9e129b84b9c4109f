"""Trap causes and the trap information written by the hardware."""

from __future__ import annotations

import enum
from dataclasses import dataclass

XLEN = 64
_XLEN_MASK = (1 << XLEN) - 1
INTERRUPT_BIT = 1 << (XLEN - 1)
"""Most significant bit of mcause, set for interrupts."""


class MCause(enum.IntEnum):
    """Values of the mcause CSR."""

    # Exceptions
    INSTR_ADDR_MISALIGNED = 0
    INSTR_ACCESS_FAULT = 1
    ILLEGAL_INSTR = 2
    BREAKPOINT = 3
    LOAD_ADDR_MISALIGNED = 4
    LOAD_ACCESS_FAULT = 5
    STORE_ADDR_MISALIGNED = 6
    STORE_ACCESS_FAULT = 7
    ECALL_FROM_U_MODE = 8
    ECALL_FROM_S_MODE = 9
    ECALL_FROM_VS_MODE = 10
    ECALL_FROM_M_MODE = 11
    INSTR_PAGE_FAULT = 12
    LOAD_PAGE_FAULT = 13
    STORE_PAGE_FAULT = 15
    UNKNOWN_EXCEPTION = 16
    INSTR_GUEST_PAGE_FAULT = 20
    LOAD_GUEST_PAGE_FAULT = 21
    VIRTUAL_INSTR = 22
    STORE_GUEST_PAGE_FAULT = 23

    # Interrupts
    USER_SOFT_INT = INTERRUPT_BIT
    SUPERVISOR_SOFT_INT = INTERRUPT_BIT + 1
    VIRTUAL_SUPERVISOR_SOFT_INT = INTERRUPT_BIT + 2
    MACHINE_SOFT_INT = INTERRUPT_BIT + 3
    USER_TIMER_INT = INTERRUPT_BIT + 4
    SUPERVISOR_TIMER_INT = INTERRUPT_BIT + 5
    VIRTUAL_SUPERVISOR_TIMER_INT = INTERRUPT_BIT + 6
    MACHINE_TIMER_INT = INTERRUPT_BIT + 7
    USER_EXTERNAL_INT = INTERRUPT_BIT + 8
    SUPERVISOR_EXTERNAL_INT = INTERRUPT_BIT + 9
    VIRTUAL_SUPERVISOR_EXTERNAL_INT = INTERRUPT_BIT + 10
    MACHINE_EXTERNAL_INT = INTERRUPT_BIT + 11
    SUPERVISOR_GUEST_EXTERNAL_INT = INTERRUPT_BIT + 12
    UNKNOWN_INT = INTERRUPT_BIT + 13

    @classmethod
    def from_raw(cls, cause: int) -> MCause:
        """Decode a raw mcause value; unrecognised codes map to the unknown causes."""
        cause &= _XLEN_MASK
        if cause & INTERRUPT_BIT:
            return _INTERRUPTS.get(cause ^ INTERRUPT_BIT, cls.UNKNOWN_INT)
        return _EXCEPTIONS.get(cause, cls.UNKNOWN_EXCEPTION)

    def is_interrupt(self) -> bool:
        """Whether this cause is an interrupt."""
        return bool(self.value & INTERRUPT_BIT)

    def is_trap(self) -> bool:
        """Whether this cause is a synchronous exception."""
        return not self.value & INTERRUPT_BIT

    def __str__(self) -> str:
        return _DESCRIPTIONS[self]


_INTERRUPTS = {
    0: MCause.USER_SOFT_INT,
    1: MCause.SUPERVISOR_SOFT_INT,
    3: MCause.MACHINE_SOFT_INT,
    4: MCause.USER_TIMER_INT,
    5: MCause.SUPERVISOR_TIMER_INT,
    7: MCause.MACHINE_TIMER_INT,
    8: MCause.USER_EXTERNAL_INT,
    9: MCause.SUPERVISOR_EXTERNAL_INT,
    11: MCause.MACHINE_EXTERNAL_INT,
}

_EXCEPTIONS = {
    0: MCause.INSTR_ADDR_MISALIGNED,
    1: MCause.INSTR_ACCESS_FAULT,
    2: MCause.ILLEGAL_INSTR,
    3: MCause.BREAKPOINT,
    4: MCause.LOAD_ADDR_MISALIGNED,
    5: MCause.LOAD_ACCESS_FAULT,
    6: MCause.STORE_ADDR_MISALIGNED,
    7: MCause.STORE_ACCESS_FAULT,
    8: MCause.ECALL_FROM_U_MODE,
    9: MCause.ECALL_FROM_S_MODE,
    11: MCause.ECALL_FROM_M_MODE,
    12: MCause.INSTR_PAGE_FAULT,
    13: MCause.LOAD_PAGE_FAULT,
    15: MCause.STORE_PAGE_FAULT,
}

_DESCRIPTIONS = {
    MCause.USER_SOFT_INT: "user software interrupt",
    MCause.SUPERVISOR_SOFT_INT: "supervisor software interrupt",
    MCause.MACHINE_SOFT_INT: "machine software interrupt",
    MCause.USER_TIMER_INT: "user timer interrupt",
    MCause.SUPERVISOR_TIMER_INT: "supervisor timer interrupt",
    MCause.MACHINE_TIMER_INT: "machine timer interrupt",
    MCause.USER_EXTERNAL_INT: "user external interrupt",
    MCause.SUPERVISOR_EXTERNAL_INT: "supervisor external interrupt",
    MCause.MACHINE_EXTERNAL_INT: "machine external interrupt",
    MCause.VIRTUAL_SUPERVISOR_SOFT_INT: "virtual supervisor software interrupt",
    MCause.VIRTUAL_SUPERVISOR_TIMER_INT: "virtual supervisor timer interrupt",
    MCause.VIRTUAL_SUPERVISOR_EXTERNAL_INT: "virtual supervisor external interrupt",
    MCause.SUPERVISOR_GUEST_EXTERNAL_INT: "supervisor guest external interrupt",
    MCause.UNKNOWN_INT: "unknown interrupt",
    MCause.INSTR_ADDR_MISALIGNED: "instruction address misaligned",
    MCause.INSTR_ACCESS_FAULT: "instruction access fault",
    MCause.ILLEGAL_INSTR: "illegal instruction",
    MCause.BREAKPOINT: "breakpoint",
    MCause.LOAD_ADDR_MISALIGNED: "load address misaligned",
    MCause.LOAD_ACCESS_FAULT: "load access fault",
    MCause.STORE_ADDR_MISALIGNED: "store/amo misaligned",
    MCause.STORE_ACCESS_FAULT: "store/amo access fault",
    MCause.ECALL_FROM_U_MODE: "ecall from u-mode",
    MCause.ECALL_FROM_S_MODE: "ecall from s-mode",
    MCause.ECALL_FROM_M_MODE: "ecall from m-mode",
    MCause.INSTR_PAGE_FAULT: "instruction page fault",
    MCause.LOAD_PAGE_FAULT: "load page fault",
    MCause.STORE_PAGE_FAULT: "store/amo page fault",
    MCause.UNKNOWN_EXCEPTION: "unknown exception",
    MCause.ECALL_FROM_VS_MODE: "ecall from vs-mode",
    MCause.INSTR_GUEST_PAGE_FAULT: "instruction guest page fault",
    MCause.LOAD_GUEST_PAGE_FAULT: "load guest page fault",
    MCause.VIRTUAL_INSTR: "virtual instruction",
    MCause.STORE_GUEST_PAGE_FAULT: "store guest page fault",
}


def cause_number(cause: int) -> int:
    """Return the cause code with the interrupt bit removed."""
    cause &= _XLEN_MASK
    if cause & INTERRUPT_BIT:
        return cause ^ INTERRUPT_BIT
    return cause


@dataclass
class TrapInfo:
    """The information written by the hardware when a trap is taken.

    ``mtval2`` and ``mtinst`` only exist with the hypervisor extension.
    """

    mepc: int = 0
    mstatus: int = 0
    mcause: int = 0
    mip: int = 0
    mtval: int = 0
    mtval2: int = 0
    mtinst: int = 0
    gva: bool = False

    def is_from_mmode(self) -> bool:
        """Whether the trap was taken from M-mode (MPP equal to 3)."""
        return (self.mstatus >> 11) & 0b11 == 3

    def cause(self) -> MCause:
        """Return the decoded trap cause."""
        return MCause.from_raw(self.mcause)