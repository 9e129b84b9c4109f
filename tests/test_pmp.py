import pytest

from miralis.pmp import (
    CFG_L,
    CFG_NA4,
    CFG_NAPOT,
    CFG_R,
    CFG_RWX,
    CFG_TOR,
    CFG_W,
    Device,
    PmpGroup,
    PmpLayout,
    init_pmp_group,
)
from miralis.segment import USIZE_MAX, Segment


def test_pmp_groups():
    pmps = PmpGroup(8)
    assert list(pmps) == []

    pmps.set_entry(0, 1000, CFG_RWX | CFG_TOR)
    pmps.set_entry(1, 1500, CFG_R | CFG_W | CFG_TOR)
    pmps.set_entry(2, 2000 >> 2, CFG_RWX | CFG_NA4)
    pmps.set_entry(3, 0x8000 >> 2 | 0b0111, CFG_RWX | CFG_NAPOT)

    expected = [
        (Segment(0, 1000), CFG_RWX),
        (Segment(1000, 500), CFG_R | CFG_W),
        (Segment(2000, 4), CFG_RWX),
        (Segment(0x8000, 64), CFG_RWX),
    ]
    assert list(pmps) == expected


def test_layout_offsets():
    layout = PmpLayout(nb_virt_devices=2, module_size=1)
    assert layout.devices_offset() == 1
    assert layout.module_offset() == 3
    assert layout.mprv_emulation_offset() == 4
    assert layout.inactive_entry_offset() == 5
    assert layout.virtual_pmp_offset() == 6
    assert layout.total_pmp() == 7


def test_init_pmp_group_protects_monitor():
    pmp = init_pmp_group(8, 0x80000000, 0x200000, layout=PmpLayout())
    assert pmp.nb_virt_pmp == 4
    assert pmp.virt_pmp_offset == 3
    assert pmp.pmpaddr[0] == 0x2003FFFF
    assert pmp.get_pmpcfg(0) == CFG_NAPOT
    assert pmp.pmpaddr[7] == USIZE_MAX
    assert pmp.get_pmpcfg(7) == CFG_NAPOT | CFG_RWX
    assert list(pmp) == [
        (Segment(0x80000000, 0x200000), 0),
        (Segment(0, USIZE_MAX), CFG_RWX),
    ]


def test_init_pmp_group_with_device_and_limit():
    device = Device("clint", 0x2000000, 0x10000)
    pmp = init_pmp_group(16, 0x80000000, 0x200000, [device], None, 2)
    assert pmp.nb_virt_pmp == 2
    assert pmp.virt_pmp_offset == 4
    assert pmp.get_pmpcfg(1) == CFG_NAPOT
    segments = [segment for segment, _ in pmp]
    assert Segment(0x2000000, 0x10000) in segments


def test_init_pmp_group_few_registers():
    pmp = init_pmp_group(4, 0x80000000, 0x200000)
    assert pmp.nb_virt_pmp == 0
    assert pmp.virt_pmp_offset == 3
    assert pmp.pmpcfg == (0,) * 8


def test_init_pmp_group_layout_too_large():
    with pytest.raises(ValueError):
        init_pmp_group(8, 0x80000000, 0x200000, layout=PmpLayout(3, 2))


def test_init_pmp_group_bad_napot():
    with pytest.raises(ValueError):
        init_pmp_group(8, 0x80000001, 0x200000)


def test_lock_bit_rejected():
    pmp = PmpGroup(8)
    with pytest.raises(ValueError):
        pmp.set_entry(0, 0, CFG_L | CFG_R)


def test_invalid_bits_dropped():
    pmp = PmpGroup(8)
    pmp.set_entry(0, 4, 0b01100000 | CFG_R)
    assert pmp.get_pmpcfg(0) == CFG_R


def test_set_pmpcfg_packing():
    pmp = PmpGroup(16)
    pmp.set_pmpcfg(9, 0x1F)
    assert pmp.pmpcfg[1] == 0x1F00
    assert pmp.get_pmpcfg(9) == 0x1F
    pmp.set_pmpcfg(9, 0x08)
    assert pmp.pmpcfg[1] == 0x0800


def test_set_napot_rejects_mode_bits():
    pmp = PmpGroup(8)
    with pytest.raises(ValueError):
        pmp.set_napot(0, 0x1000, 8, CFG_TOR)


def test_set_tor():
    pmp = PmpGroup(8)
    pmp.set_tor(0, 0x1000, CFG_R)
    assert pmp.pmpaddr[0] == 0x400
    assert pmp.get_pmpcfg(0) == CFG_R | CFG_TOR


def test_load_with_offset_removes_lock():
    pmp = PmpGroup(16)
    addrs = [1, 2, 3] + [0] * 61
    cfgs = [0x8F8F8F] + [0] * 7
    pmp.load_with_offset(addrs, cfgs, 3, 3)
    assert pmp.pmpaddr[3:6] == (1, 2, 3)
    assert [pmp.get_pmpcfg(i) for i in range(3, 6)] == [0x0F, 0x0F, 0x0F]
    assert pmp.get_pmpcfg(6) == 0


def test_set_range_rwx():
    pmp = PmpGroup(8)
    pmp.set_pmpcfg(2, CFG_TOR)
    pmp.set_range_rwx(2, 2)
    assert pmp.get_pmpcfg(2) == CFG_TOR | CFG_RWX
    assert pmp.get_pmpcfg(3) == CFG_RWX
    assert pmp.get_pmpcfg(4) == 0


def test_set_from_policy():
    layout = PmpLayout(nb_virt_devices=1, module_size=1)
    pmp = PmpGroup(8, layout)
    pmp.set_from_policy(0, 5, CFG_TOR | CFG_R)
    assert pmp.pmpaddr[2] == 5
    assert pmp.get_pmpcfg(2) == CFG_TOR | CFG_R
    with pytest.raises(IndexError):
        pmp.set_from_policy(1, 5, CFG_TOR)


def test_too_many_registers():
    with pytest.raises(ValueError):
        PmpGroup(65)


def test_display():
    pmp = PmpGroup(2)
    pmp.set_tor(0, 0x1000, CFG_RWX)
    pmp.set_napot(1, 0x8000, 64, CFG_R)
    expected = (
        "\nPMP  0  " + " " * 15 + "0 " + " " * 12 + "1000 | RWX  TOR"
        "\nPMP  1  " + " " * 12 + "8000 " + " " * 12 + "8040 | R__  NAPOT"
    )
    assert str(pmp) == expected