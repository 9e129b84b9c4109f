"""RISC-V general purpose registers and control and status registers (CSRs)."""

from __future__ import annotations

import enum
from dataclasses import dataclass

_XLEN_MASK = (1 << 64) - 1


class Register(enum.IntEnum):
    """General purpose registers x0 to x31."""

    X0 = 0  # zero
    X1 = 1  # ra
    X2 = 2  # sp
    X3 = 3  # gp
    X4 = 4  # tp
    X5 = 5  # t0
    X6 = 6  # t1
    X7 = 7  # t2
    X8 = 8  # s0 / fp
    X9 = 9  # s1
    X10 = 10  # a0
    X11 = 11  # a1
    X12 = 12  # a2
    X13 = 13  # a3
    X14 = 14  # a4
    X15 = 15  # a5
    X16 = 16  # a6, SBI function ID
    X17 = 17  # a7, SBI extension ID
    X18 = 18  # s2
    X19 = 19  # s3
    X20 = 20  # s4
    X21 = 21  # s5
    X22 = 22  # s6
    X23 = 23  # s7
    X24 = 24  # s8
    X25 = 25  # s9
    X26 = 26  # s10
    X27 = 27  # s11
    X28 = 28  # t3
    X29 = 29  # t4
    X30 = 30  # t5
    X31 = 31  # t6

    @classmethod
    def masked(cls, value: int) -> Register:
        """Return the register encoded by the low five bits of ``value``."""
        return cls(value & 0b11111)


# ——————————————————————————— CSR addresses ——————————————————————————— #

# Machine mode CSRs
MSTATUS = 0x300
MISA = 0x301
MEDELEG = 0x302
MIDELEG = 0x303
MIE = 0x304
MTVEC = 0x305
MCOUNTEREN = 0x306
MENVCFG = 0x30A
MCOUNTINHIBIT = 0x320
MHPMEVENT3 = 0x323
MHPMEVENT31 = 0x33F
MSCRATCH = 0x340
MEPC = 0x341
MCAUSE = 0x342
MTVAL = 0x343
MIP = 0x344
MTINST = 0x34A
MTVAL2 = 0x34B
PMPCFG0 = 0x3A0
PMPCFG15 = 0x3AF
PMPADDR0 = 0x3B0
PMPADDR63 = 0x3EF
MSECCFG = 0x747
TSELECT = 0x7A0
TDATA1 = 0x7A1
TDATA2 = 0x7A2
TDATA3 = 0x7A3
MCONTEXT = 0x7A8
DCSR = 0x7B0
DPC = 0x7B1
DSCRATCH0 = 0x7B2
DSCRATCH1 = 0x7B3
MCYCLE = 0xB00
MINSTRET = 0xB02
MHPMCOUNTER3 = 0xB03
MHPMCOUNTER31 = 0xB1F
CYCLE = 0xC00
TIME = 0xC01
INSTRET = 0xC02
VL = 0xC20
VTYPE = 0xC21
VLENB = 0xC22
MVENDORID = 0xF11
MARCHID = 0xF12
MIMPID = 0xF13
MHARTID = 0xF14
MCONFIGPTR = 0xF15

# Supervisor mode CSRs
SSTATUS = 0x100
SIE = 0x104
STVEC = 0x105
SCOUNTEREN = 0x106
SENVCFG = 0x10A
SSCRATCH = 0x140
SEPC = 0x141
SCAUSE = 0x142
STVAL = 0x143
SIP = 0x144
STIMECMP = 0x14D
SATP = 0x180
SCONTEXT = 0x5A8

# Hypervisor and virtual supervisor CSRs
VSSTATUS = 0x200
VSIE = 0x204
VSTVEC = 0x205
VSSCRATCH = 0x240
VSEPC = 0x241
VSCAUSE = 0x242
VSTVAL = 0x243
VSIP = 0x244
VSATP = 0x280
HSTATUS = 0x600
HEDELEG = 0x602
HIDELEG = 0x603
HIE = 0x604
HTIMEDELTA = 0x605
HCOUNTEREN = 0x606
HGEIE = 0x607
HGEIP = 0xE12
HENVCFG = 0x60A
HTVAL = 0x643
HIP = 0x644
HVIP = 0x645
HTINST = 0x64A
HGATP = 0x680

# Vector extension CSRs
VSTART = 0x8
VXSAT = 0x9
VXRM = 0xA
VCSR = 0xF

# Crypto extension CSRs
SEED = 0x15


# ——————————————————————————— CSR masks ——————————————————————————— #

PMP_CFG_LOCK_MASK = sum((0b1 << 7) << shift for shift in range(0, 64, 8))
PMP_CFG_LEGAL_MASK = ~sum((0b11 << 5) << shift for shift in range(0, 64, 8)) & _XLEN_MASK
PMP_ADDR_LEGAL_MASK = ~(0b1111111111 << 54) & _XLEN_MASK
MCOUNTINHIBIT_LEGAL_MASK = ~0b10 & _XLEN_MASK


class CsrKind(enum.Enum):
    """The kinds of CSR known to the monitor."""

    # Machine mode
    MHARTID = enum.auto()
    MSTATUS = enum.auto()
    MISA = enum.auto()
    MIE = enum.auto()
    MTVEC = enum.auto()
    MSCRATCH = enum.auto()
    MIP = enum.auto()
    MVENDORID = enum.auto()
    MARCHID = enum.auto()
    MIMPID = enum.auto()
    PMPCFG = enum.auto()
    PMPADDR = enum.auto()
    MCYCLE = enum.auto()
    MINSTRET = enum.auto()
    CYCLE = enum.auto()
    TIME = enum.auto()
    INSTRET = enum.auto()
    MHPMCOUNTER = enum.auto()
    MCOUNTINHIBIT = enum.auto()
    MHPMEVENT = enum.auto()
    MCOUNTEREN = enum.auto()
    MENVCFG = enum.auto()
    MSECCFG = enum.auto()
    MCONFIGPTR = enum.auto()
    MEDELEG = enum.auto()
    MIDELEG = enum.auto()
    MTINST = enum.auto()
    MTVAL2 = enum.auto()
    TSELECT = enum.auto()
    TDATA1 = enum.auto()
    TDATA2 = enum.auto()
    TDATA3 = enum.auto()
    MCONTEXT = enum.auto()
    DCSR = enum.auto()
    DPC = enum.auto()
    DSCRATCH0 = enum.auto()
    DSCRATCH1 = enum.auto()
    MEPC = enum.auto()
    MCAUSE = enum.auto()
    MTVAL = enum.auto()
    # Supervisor mode
    SSTATUS = enum.auto()
    SIE = enum.auto()
    STVEC = enum.auto()
    SCOUNTEREN = enum.auto()
    SENVCFG = enum.auto()
    SSCRATCH = enum.auto()
    SEPC = enum.auto()
    SCAUSE = enum.auto()
    STVAL = enum.auto()
    SIP = enum.auto()
    SATP = enum.auto()
    SCONTEXT = enum.auto()
    STIMECMP = enum.auto()
    # Hypervisor and virtual supervisor
    HSTATUS = enum.auto()
    HEDELEG = enum.auto()
    HIDELEG = enum.auto()
    HVIP = enum.auto()
    HIP = enum.auto()
    HIE = enum.auto()
    HGEIP = enum.auto()
    HGEIE = enum.auto()
    HENVCFG = enum.auto()
    HCOUNTEREN = enum.auto()
    HTIMEDELTA = enum.auto()
    HTVAL = enum.auto()
    HTINST = enum.auto()
    HGATP = enum.auto()
    VSSTATUS = enum.auto()
    VSIE = enum.auto()
    VSTVEC = enum.auto()
    VSSCRATCH = enum.auto()
    VSEPC = enum.auto()
    VSCAUSE = enum.auto()
    VSTVAL = enum.auto()
    VSIP = enum.auto()
    VSATP = enum.auto()
    # Vector extension
    VSTART = enum.auto()
    VXSAT = enum.auto()
    VXRM = enum.auto()
    VCSR = enum.auto()
    VL = enum.auto()
    VTYPE = enum.auto()
    VLENB = enum.auto()
    # Crypto extension
    SEED = enum.auto()
    # SoC specific, the index holds the CSR address
    CUSTOM = enum.auto()
    UNKNOWN = enum.auto()

    @property
    def indexed(self) -> bool:
        """Whether CSRs of this kind carry an index."""
        return self in _INDEXED_BASE or self is CsrKind.CUSTOM


_INDEXED_BASE = {
    CsrKind.PMPCFG: PMPCFG0,
    CsrKind.PMPADDR: PMPADDR0,
    CsrKind.MHPMCOUNTER: MHPMCOUNTER3,
    CsrKind.MHPMEVENT: MHPMEVENT3,
}

_FIXED_INDEX = {
    CsrKind.MHARTID: MHARTID,
    CsrKind.MSTATUS: MSTATUS,
    CsrKind.MISA: MISA,
    CsrKind.MIE: MIE,
    CsrKind.MTVEC: MTVEC,
    CsrKind.MSCRATCH: MSCRATCH,
    CsrKind.MIP: MIP,
    CsrKind.MVENDORID: MVENDORID,
    CsrKind.MARCHID: MARCHID,
    CsrKind.MIMPID: MIMPID,
    CsrKind.MCYCLE: MCYCLE,
    CsrKind.MINSTRET: MINSTRET,
    CsrKind.CYCLE: CYCLE,
    CsrKind.TIME: TIME,
    CsrKind.INSTRET: INSTRET,
    CsrKind.MCOUNTINHIBIT: MCOUNTINHIBIT,
    CsrKind.MCOUNTEREN: MCOUNTEREN,
    CsrKind.MENVCFG: MENVCFG,
    CsrKind.MSECCFG: MSECCFG,
    CsrKind.MCONFIGPTR: MCONFIGPTR,
    CsrKind.MEDELEG: MEDELEG,
    CsrKind.MIDELEG: MIDELEG,
    CsrKind.MTINST: MTINST,
    CsrKind.MTVAL2: MTVAL2,
    CsrKind.TSELECT: TSELECT,
    CsrKind.TDATA1: TDATA1,
    CsrKind.TDATA2: TDATA2,
    CsrKind.TDATA3: TDATA3,
    CsrKind.MCONTEXT: MCONTEXT,
    CsrKind.DCSR: DCSR,
    CsrKind.DPC: DPC,
    CsrKind.DSCRATCH0: DSCRATCH0,
    CsrKind.DSCRATCH1: DSCRATCH1,
    CsrKind.MEPC: MEPC,
    CsrKind.MCAUSE: MCAUSE,
    CsrKind.MTVAL: MTVAL,
    CsrKind.SSTATUS: SSTATUS,
    CsrKind.SIE: SIE,
    CsrKind.STVEC: STVEC,
    CsrKind.SCOUNTEREN: SCOUNTEREN,
    CsrKind.SENVCFG: SENVCFG,
    CsrKind.SSCRATCH: SSCRATCH,
    CsrKind.SEPC: SEPC,
    CsrKind.SCAUSE: SCAUSE,
    CsrKind.STVAL: STVAL,
    CsrKind.SIP: SIP,
    CsrKind.SATP: SATP,
    CsrKind.SCONTEXT: SCONTEXT,
    CsrKind.STIMECMP: STIMECMP,
    CsrKind.HSTATUS: HSTATUS,
    CsrKind.HEDELEG: HEDELEG,
    CsrKind.HIDELEG: HIDELEG,
    CsrKind.HVIP: HVIP,
    CsrKind.HIP: HIP,
    CsrKind.HIE: HIE,
    CsrKind.HGEIP: HGEIP,
    CsrKind.HGEIE: HGEIE,
    CsrKind.HENVCFG: HENVCFG,
    CsrKind.HCOUNTEREN: HCOUNTEREN,
    CsrKind.HTIMEDELTA: HTIMEDELTA,
    CsrKind.HTVAL: HTVAL,
    CsrKind.HTINST: HTINST,
    CsrKind.HGATP: HGATP,
    CsrKind.VSSTATUS: VSSTATUS,
    CsrKind.VSIE: VSIE,
    CsrKind.VSTVEC: VSTVEC,
    CsrKind.VSSCRATCH: VSSCRATCH,
    CsrKind.VSEPC: VSEPC,
    CsrKind.VSCAUSE: VSCAUSE,
    CsrKind.VSTVAL: VSTVAL,
    CsrKind.VSIP: VSIP,
    CsrKind.VSATP: VSATP,
    CsrKind.VSTART: VSTART,
    CsrKind.VXSAT: VXSAT,
    CsrKind.VXRM: VXRM,
    CsrKind.VCSR: VCSR,
    CsrKind.VL: VL,
    CsrKind.VTYPE: VTYPE,
    CsrKind.VLENB: VLENB,
    CsrKind.SEED: SEED,
}


@dataclass(frozen=True)
class Csr:
    """A control and status register, with an index for the numbered kinds."""

    kind: CsrKind
    index: int = 0

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"negative CSR index: {self.index}")
        if self.index and not self.kind.indexed:
            raise ValueError(f"{self.kind.name} takes no index")

    def is_unknown(self) -> bool:
        """Whether this is the unknown CSR."""
        return self.kind is CsrKind.UNKNOWN

    def idx(self) -> int:
        """Return the address of the CSR in the CSR address space."""
        if self.kind is CsrKind.UNKNOWN:
            raise ValueError("Cannot get index of unknown CSR")
        if self.kind is CsrKind.CUSTOM:
            return self.index
        base = _INDEXED_BASE.get(self.kind)
        if base is not None:
            return base + self.index
        return _FIXED_INDEX[self.kind]