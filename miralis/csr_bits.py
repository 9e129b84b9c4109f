"""Bit layouts of the machine and hypervisor CSRs, and field helpers."""

from __future__ import annotations

import enum

XLEN = 64
_XLEN_MASK = (1 << XLEN) - 1

PAGE_SIZE = 4096

# ——————————————————————————— Machine ISA (misa) ——————————————————————————— #

MISA_A = 1 << 0  # Atomic
MISA_C = 1 << 2  # Compressed instructions
MISA_D = 1 << 3  # Double-precision floating point
MISA_E = 1 << 4  # RV32E base ISA
MISA_F = 1 << 5  # Single-precision floating point
MISA_H = 1 << 7  # Hypervisor
MISA_I = 1 << 8  # RV32I/64I/128I base ISA
MISA_M = 1 << 12  # Integer multiply/divide
MISA_N = 1 << 13  # User-level interrupts
MISA_Q = 1 << 16  # Quad-precision floating point
MISA_S = 1 << 18  # Supervisor mode
MISA_U = 1 << 20  # User mode
MISA_X = 1 << 23  # Non-standard extensions

MISA_MXL = 0b10 << (XLEN - 2)
"""Machine XLEN field; only 64 bits is supported."""

MISA_DISABLED = MISA_N | MISA_F | MISA_D | MISA_Q
"""Extensions disabled by the current configuration."""

MISA_CHANGE_FILTER = 0x0000000003FFFFFF
"""Writable fields of misa."""

# ——————————————————————————— Machine status (mstatus) ——————————————————————————— #

MSTATUS_UIE_OFFSET = 0
MSTATUS_UIE_FILTER = 0b1 << MSTATUS_UIE_OFFSET
MSTATUS_SIE_OFFSET = 1
MSTATUS_SIE_FILTER = 0b1 << MSTATUS_SIE_OFFSET
MSTATUS_MIE_OFFSET = 3
MSTATUS_MIE_FILTER = 0b1 << MSTATUS_MIE_OFFSET
MSTATUS_UPIE_OFFSET = 4
MSTATUS_UPIE_FILTER = 0b1 << MSTATUS_UPIE_OFFSET
MSTATUS_SPIE_OFFSET = 5
MSTATUS_SPIE_FILTER = 0b1 << MSTATUS_SPIE_OFFSET
MSTATUS_UBE_OFFSET = 6
MSTATUS_UBE_FILTER = 0b1 << MSTATUS_UBE_OFFSET
MSTATUS_MPIE_OFFSET = 7
MSTATUS_MPIE_FILTER = 0b1 << MSTATUS_MPIE_OFFSET
MSTATUS_SPP_OFFSET = 8
MSTATUS_SPP_FILTER = 0b1 << MSTATUS_SPP_OFFSET
MSTATUS_VS_OFFSET = 9
MSTATUS_VS_FILTER = 0b11 << MSTATUS_VS_OFFSET
MSTATUS_MPP_OFFSET = 11
MSTATUS_MPP_FILTER = 0b11 << MSTATUS_MPP_OFFSET
MSTATUS_FS_OFFSET = 13
MSTATUS_FS_FILTER = 0b11 << MSTATUS_FS_OFFSET
MSTATUS_XS_OFFSET = 15
MSTATUS_XS_FILTER = 0b11 << MSTATUS_XS_OFFSET
MSTATUS_MPRV_OFFSET = 17
MSTATUS_MPRV_FILTER = 0b1 << MSTATUS_MPRV_OFFSET
MSTATUS_SUM_OFFSET = 18
MSTATUS_SUM_FILTER = 0b1 << MSTATUS_SUM_OFFSET
MSTATUS_MXR_OFFSET = 19
MSTATUS_MXR_FILTER = 0b1 << MSTATUS_MXR_OFFSET
MSTATUS_TVM_OFFSET = 20
MSTATUS_TVM_FILTER = 0b1 << MSTATUS_TVM_OFFSET
MSTATUS_TW_OFFSET = 21
MSTATUS_TW_FILTER = 0b1 << MSTATUS_TW_OFFSET
MSTATUS_TSR_OFFSET = 22
MSTATUS_TSR_FILTER = 0b1 << MSTATUS_TSR_OFFSET
MSTATUS_UXL_OFFSET = 32
MSTATUS_UXL_FILTER = 0b11 << MSTATUS_UXL_OFFSET
MSTATUS_SXL_OFFSET = 34
MSTATUS_SXL_FILTER = 0b11 << MSTATUS_SXL_OFFSET
MSTATUS_SBE_OFFSET = 36
MSTATUS_SBE_FILTER = 0b1 << MSTATUS_SBE_OFFSET
MSTATUS_MBE_OFFSET = 37
MSTATUS_MBE_FILTER = 0b1 << MSTATUS_MBE_OFFSET
MSTATUS_GVA_OFFSET = 38
MSTATUS_GVA_FILTER = 0b1 << MSTATUS_GVA_OFFSET
MSTATUS_MPV_OFFSET = 39
MSTATUS_MPV_FILTER = 0b1 << MSTATUS_MPV_OFFSET
MSTATUS_SD_OFFSET = 63
MSTATUS_SD_FILTER = 0b1 << MSTATUS_SD_OFFSET

SSTATUS_FILTER = (
    MSTATUS_UIE_FILTER
    | MSTATUS_SIE_FILTER
    | MSTATUS_SPIE_FILTER
    | MSTATUS_UBE_FILTER
    | MSTATUS_SPP_FILTER
    | MSTATUS_VS_FILTER
    | MSTATUS_FS_FILTER
    | MSTATUS_XS_FILTER
    | MSTATUS_SUM_FILTER
    | MSTATUS_MXR_FILTER
    | MSTATUS_UXL_FILTER
    | MSTATUS_SD_FILTER
)
"""Non-WPRI fields of sstatus."""

MSTATUS_FILTER = (
    SSTATUS_FILTER
    | MSTATUS_MIE_FILTER
    | MSTATUS_MPIE_FILTER
    | MSTATUS_MPP_FILTER
    | MSTATUS_MPRV_FILTER
    | MSTATUS_TVM_FILTER
    | MSTATUS_TW_FILTER
    | MSTATUS_TSR_FILTER
    | MSTATUS_SXL_FILTER
    | MSTATUS_SBE_FILTER
    | MSTATUS_MBE_FILTER
    | MSTATUS_GVA_FILTER
    | MSTATUS_MPV_FILTER
)
"""Non-WPRI fields of mstatus."""

# ——————————————————————— Machine interrupt enable (mie) ——————————————————————— #

MIE_SSIE_OFFSET = 1
MIE_SSIE_FILTER = 0b1 << MIE_SSIE_OFFSET
MIE_MSIE_OFFSET = 3
MIE_MSIE_FILTER = 0b1 << MIE_MSIE_OFFSET
MIE_STIE_OFFSET = 5
MIE_STIE_FILTER = 0b1 << MIE_STIE_OFFSET
MIE_MTIE_OFFSET = 7
MIE_MTIE_FILTER = 0b1 << MIE_MTIE_OFFSET
MIE_SEIE_OFFSET = 9
MIE_SEIE_FILTER = 0b1 << MIE_SEIE_OFFSET
MIE_MEIE_OFFSET = 11
MIE_MEIE_FILTER = 0b1 << MIE_MEIE_OFFSET
MIE_LCOFIE_OFFSET = 13
MIE_LCOFIE_FILTER = 0b1 << MIE_LCOFIE_OFFSET

MIE_SIE_FILTER = MIE_SSIE_FILTER | MIE_STIE_FILTER | MIE_SEIE_FILTER
"""Supervisor interrupt bits (LCOFIE is not supported yet)."""

MIE_WRITE_FILTER = MIE_SIE_FILTER | MIE_MSIE_FILTER | MIE_MTIE_FILTER | MIE_MEIE_FILTER
"""Writable bits of mie."""

MIP_WRITE_FILTER = MIE_SSIE_FILTER | MIE_STIE_FILTER | MIE_SEIE_FILTER
"""Writable bits of mip."""

MIDELEG_READ_ONLY_ONE = MIE_SSIE_FILTER | MIE_STIE_FILTER | MIE_SEIE_FILTER | MIE_LCOFIE_FILTER
"""Interrupts always delegated to S-mode."""

MIDELEG_READ_ONLY_ZERO = MIE_MSIE_FILTER | MIE_MTIE_FILTER | MIE_MEIE_FILTER
"""Interrupts virtualised by the monitor, never delegated."""

MIE_ALL_INT = (
    MIE_SSIE_FILTER
    | MIE_MSIE_FILTER
    | MIE_STIE_FILTER
    | MIE_MTIE_FILTER
    | MIE_SEIE_FILTER
    | MIE_MEIE_FILTER
)
"""All valid interrupt bits."""

# ——————————————————— Machine trap-vector base address (mtvec) ——————————————————— #

MTVEC_MODE_FILTER = 0b11
MTVEC_BASE_FILTER = ~MTVEC_MODE_FILTER & _XLEN_MASK


class TrapVectorMode(enum.IntEnum):
    """Trap-vector modes of mtvec."""

    DIRECT = 0
    VECTORED = 1


def get_trap_vector_mode(mtvec: int) -> TrapVectorMode:
    """Return the trap-vector mode encoded in ``mtvec``."""
    mode = mtvec & MTVEC_MODE_FILTER
    if mode == TrapVectorMode.DIRECT:
        return TrapVectorMode.DIRECT
    if mode == TrapVectorMode.VECTORED:
        return TrapVectorMode.VECTORED
    raise ValueError("Invalid trap-vector mode.")


# ——————————————————— Machine environment configuration (menvcfg) ——————————————————— #

MENVCFG_FIOM_OFFSET = 0
MENVCFG_FIOM_FILTER = 0b1 << MENVCFG_FIOM_OFFSET
MENVCFG_CBIE_OFFSET = 4
MENVCFG_CBIE_FILTER = 0b11 << MENVCFG_CBIE_OFFSET
MENVCFG_CBCFE_OFFSET = 6
MENVCFG_CBCFE_FILTER = 0b1 << MENVCFG_CBCFE_OFFSET
MENVCFG_CBZE_OFFSET = 7
MENVCFG_CBZE_FILTER = 0b1 << MENVCFG_CBZE_OFFSET
MENVCFG_STCE_OFFSET = 63
MENVCFG_STCE_FILTER = 0b1 << MENVCFG_STCE_OFFSET

MENVCFG_ALL = (
    MENVCFG_FIOM_FILTER
    | MENVCFG_CBIE_FILTER
    | MENVCFG_CBCFE_FILTER
    | MENVCFG_CBZE_FILTER
    | MENVCFG_STCE_FILTER
)
"""All valid menvcfg bits; a given hart may implement fewer."""

# ——————————————————————————— Hypervisor status (hstatus) ——————————————————————————— #

HSTATUS_VSBE_OFFSET = 5
HSTATUS_VSBE_FILTER = 0b1 << HSTATUS_VSBE_OFFSET
HSTATUS_GVA_OFFSET = 6
HSTATUS_GVA_FILTER = 0b1 << HSTATUS_GVA_OFFSET
HSTATUS_SPV_OFFSET = 7
HSTATUS_SPV_FILTER = 0b1 << HSTATUS_SPV_OFFSET
HSTATUS_SPVP_OFFSET = 8
HSTATUS_SPVP_FILTER = 0b1 << HSTATUS_SPVP_OFFSET
HSTATUS_VTVM_OFFSET = 20
HSTATUS_VTVM_FILTER = 0b1 << HSTATUS_VTVM_OFFSET
HSTATUS_VTW_OFFSET = 21
HSTATUS_VTW_FILTER = 0b1 << HSTATUS_VTW_OFFSET
HSTATUS_VTSR_OFFSET = 22
HSTATUS_VTSR_FILTER = 0b1 << HSTATUS_VTSR_OFFSET
HSTATUS_VSXL_OFFSET = 32
HSTATUS_VSXL_FILTER = 0b11 << HSTATUS_VSXL_OFFSET

# ——————————————————————————— Performance counters ——————————————————————————— #

DELEGATE_CYCLE_MASK = 0x1
DELEGATE_TIME_MASK = 0x2
DELEGATE_INSTRET_MASK = 0x4
DELEGATE_PERF_COUNTERS_MASK = DELEGATE_INSTRET_MASK | DELEGATE_TIME_MASK | DELEGATE_CYCLE_MASK

# ——————————————————————————— Field helpers ——————————————————————————— #


def field(value: int, offset: int, filter: int) -> int:
    """Extract the field selected by ``filter`` and shift it down by ``offset``."""
    return ((value & _XLEN_MASK) & filter) >> offset


def with_field(value: int, offset: int, filter: int, field_value: int) -> int:
    """Return ``value`` with the field selected by ``filter`` replaced by ``field_value``."""
    if field_value < 0:
        raise ValueError(f"negative field value: {field_value}")
    shifted = field_value << offset
    if shifted & ~filter:
        raise ValueError(f"value {field_value:#x} does not fit in field {filter:#x}")
    return ((value & _XLEN_MASK) & ~filter) | shifted