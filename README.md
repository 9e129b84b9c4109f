# miralis

Pure-Python models of the RISC-V machine-mode state that a firmware
virtualisation monitor works with: registers, control and status registers,
trap causes and Physical Memory Protection (PMP). The package has no
dependencies outside the standard library.

## Modules

### `miralis.registers`

- `Register`: an `IntEnum` of the general purpose registers `X0` to `X31`.
  `Register.masked(value)` returns the register encoded by the low five bits
  of `value`.
- `CsrKind`: every kind of CSR known to the package. `CsrKind.indexed` tells
  whether CSRs of that kind carry an index (`PMPCFG`, `PMPADDR`,
  `MHPMCOUNTER`, `MHPMEVENT` and `CUSTOM`).
- `Csr(kind, index=0)`: a frozen dataclass. `Csr.idx()` returns the CSR's
  address (for numbered kinds, base address plus index; for `CUSTOM`, the
  index itself) and raises `ValueError` for `UNKNOWN`. `Csr.is_unknown()`
  tells whether it is the unknown CSR. A negative index, or an index on a kind
  that takes none, raises `ValueError`.
- CSR address constants (`MSTATUS`, `MTVEC`, `PMPCFG0`, `SATP`, `HGATP`, ...)
  and the masks `PMP_CFG_LOCK_MASK`, `PMP_CFG_LEGAL_MASK`,
  `PMP_ADDR_LEGAL_MASK` and `MCOUNTINHIBIT_LEGAL_MASK`.

### `miralis.trap`

- `MCause`: an `IntEnum` of exception and interrupt causes.
  `MCause.from_raw(cause)` decodes a raw `mcause` value; codes it does not
  recognise become `UNKNOWN_EXCEPTION` or `UNKNOWN_INT`. `is_interrupt()` and
  `is_trap()` test the interrupt bit, and `str()` gives a readable description
  such as `"illegal instruction"`.
- `cause_number(cause)`: the cause code without the interrupt bit.
- `TrapInfo`: a dataclass of the values the hardware writes on a trap
  (`mepc`, `mstatus`, `mcause`, `mip`, `mtval`, `mtval2`, `mtinst`, `gva`).
  `is_from_mmode()` checks whether MPP is 3; `cause()` decodes `mcause`.

### `miralis.csr_bits`

- Offset and filter constants for `misa`, `mstatus`, `mie`/`mip`, `mtvec`,
  `menvcfg`, `hstatus` and the counter delegation masks, together with
  composite filters such as `MSTATUS_FILTER`, `SSTATUS_FILTER`,
  `MIE_WRITE_FILTER` and `MIDELEG_READ_ONLY_ONE`.
- `TrapVectorMode` and `get_trap_vector_mode(mtvec)`, which raises
  `ValueError` for the reserved modes.
- `field(value, offset, filter)` extracts a field;
  `with_field(value, offset, filter, field_value)` replaces one and raises
  `ValueError` when the new value is negative or does not fit.

### `miralis.segment`

- `build_napot(start, size)`: the NAPOT `pmpaddr` encoding of a region, or
  `None` if the size is below 8, not a power of two, or the start is not
  aligned on it. `build_napot(0, USIZE_MAX)` covers all memory.
- `build_tor(until)`: the TOR `pmpaddr` encoding.
- `Segment(start, size)`: a frozen memory segment whose size is clamped so its
  end fits in 64 bits, with `end()`, `overlap(other)` and `contain(other)`.

### `miralis.pmp`

- `CFG_*` constants for the `pmpcfg` permission, matching-mode and lock bits.
- `Device(name, start_addr, size)`: a memory region to protect.
- `PmpLayout(nb_virt_devices=0, module_size=0)`: where the monitor's own
  entries sit ahead of the virtual PMPs (`devices_offset()`,
  `module_offset()`, `mprv_emulation_offset()`, `inactive_entry_offset()`,
  `virtual_pmp_offset()`, `total_pmp()`).
- `PmpGroup(nb_pmp, layout=None)`: up to 64 `pmpaddr` values and 8 packed
  `pmpcfg` registers. It has `set_entry`, `set_napot`, `set_tor`,
  `set_inactive`, `set_from_policy`, `set_pmpcfg`, `get_pmpcfg`,
  `load_with_offset` (which strips lock bits) and `set_range_rwx`. Setting a
  lock bit raises `ValueError`. Iterating a group yields
  `(Segment, permissions)` for each active entry; `str()` prints one line per
  entry with its range, permissions and mode.
- `init_pmp_group(nb_pmp, start, size, devices=(), layout=None,
  max_virt_pmp=None)`: builds the initial configuration. It protects the
  monitor's memory and each device, reserves the module, MPRV-emulation and
  null entries, and grants all memory in the last entry. It also computes the
  number of virtual PMPs. With fewer than 8 registers it configures nothing.

## Example

```python
from miralis.segment import build_napot, Segment
from miralis.pmp import PmpGroup, CFG_RWX
from miralis.trap import MCause

assert build_napot(0x1000, 16) == 0x401

pmps = PmpGroup(8)
pmps.set_tor(0, 1000, CFG_RWX)
for segment, permissions in pmps:
    print(segment.start, segment.end(), permissions)
print(pmps)

assert Segment(20, 10).overlap(Segment(25, 2))
assert str(MCause.from_raw(2)) == "illegal instruction"
```

## What it does not do

This package models register values only. It does not touch real hardware,
execute or emulate guest instructions, or switch privilege modes. It has no
command-line program. It does not model privilege modes or hardware
capability detection, and it does not measure stack usage or collect trap
statistics.

## Running the tests

```
pip install -e .[test]
pytest
```