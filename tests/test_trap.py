import pytest

from miralis.trap import INTERRUPT_BIT, MCause, TrapInfo, cause_number

DECODED_EXCEPTIONS = [
    MCause.INSTR_ADDR_MISALIGNED,
    MCause.INSTR_ACCESS_FAULT,
    MCause.ILLEGAL_INSTR,
    MCause.BREAKPOINT,
    MCause.LOAD_ADDR_MISALIGNED,
    MCause.LOAD_ACCESS_FAULT,
    MCause.STORE_ADDR_MISALIGNED,
    MCause.STORE_ACCESS_FAULT,
    MCause.ECALL_FROM_U_MODE,
    MCause.ECALL_FROM_S_MODE,
    MCause.ECALL_FROM_M_MODE,
    MCause.INSTR_PAGE_FAULT,
    MCause.LOAD_PAGE_FAULT,
    MCause.STORE_PAGE_FAULT,
]

DECODED_INTERRUPTS = [
    MCause.USER_SOFT_INT,
    MCause.SUPERVISOR_SOFT_INT,
    MCause.MACHINE_SOFT_INT,
    MCause.USER_TIMER_INT,
    MCause.SUPERVISOR_TIMER_INT,
    MCause.MACHINE_TIMER_INT,
    MCause.USER_EXTERNAL_INT,
    MCause.SUPERVISOR_EXTERNAL_INT,
    MCause.MACHINE_EXTERNAL_INT,
]


@pytest.mark.parametrize("cause", DECODED_EXCEPTIONS + DECODED_INTERRUPTS)
def test_from_raw_round_trip(cause):
    assert MCause.from_raw(int(cause)) is cause


def test_from_raw_illegal_instruction():
    assert MCause.from_raw(2) is MCause.ILLEGAL_INSTR


def test_from_raw_machine_timer():
    assert MCause.from_raw(INTERRUPT_BIT | 7) is MCause.MACHINE_TIMER_INT


@pytest.mark.parametrize("raw", [10, 14, 16, 20, 23, 1000])
def test_unmapped_exception_codes_are_unknown(raw):
    assert MCause.from_raw(raw) is MCause.UNKNOWN_EXCEPTION


@pytest.mark.parametrize("code", [2, 6, 10, 12, 13, 500])
def test_unmapped_interrupt_codes_are_unknown(code):
    assert MCause.from_raw(INTERRUPT_BIT | code) is MCause.UNKNOWN_INT


@pytest.mark.parametrize("cause", DECODED_EXCEPTIONS)
def test_exceptions_are_traps(cause):
    decoded = MCause.from_raw(int(cause))
    assert decoded.is_trap()
    assert not decoded.is_interrupt()


@pytest.mark.parametrize("cause", DECODED_INTERRUPTS + [MCause.UNKNOWN_INT])
def test_interrupts_are_interrupts(cause):
    decoded = MCause.from_raw(int(cause))
    assert decoded.is_interrupt()
    assert not decoded.is_trap()


@pytest.mark.parametrize("cause", list(MCause))
def test_cause_number_clears_interrupt_bit(cause):
    number = cause_number(int(cause))
    assert number & INTERRUPT_BIT == 0
    assert number | (INTERRUPT_BIT if cause.is_interrupt() else 0) == int(cause)


def test_cause_number_of_exception_is_unchanged():
    assert cause_number(13) == 13


def test_cause_number_of_interrupt():
    assert cause_number(INTERRUPT_BIT | 7) == 7


def test_descriptions():
    assert str(MCause.from_raw(2)) == "illegal instruction"
    assert str(MCause.from_raw(INTERRUPT_BIT | 7)) == "machine timer interrupt"
    assert str(MCause.from_raw(15)) == "store/amo page fault"


def test_every_cause_has_a_distinct_description():
    descriptions = [MCause.__str__(cause) for cause in MCause]
    assert len(set(descriptions)) == len(MCause)


def test_trap_info_from_mmode():
    assert TrapInfo(mstatus=0b11 << 11).is_from_mmode()
    assert not TrapInfo(mstatus=0b01 << 11).is_from_mmode()
    assert not TrapInfo().is_from_mmode()


def test_trap_info_cause():
    info = TrapInfo(mcause=INTERRUPT_BIT | 11)
    assert info.cause() is MCause.MACHINE_EXTERNAL_INT
    assert TrapInfo(mcause=9).cause() is MCause.ECALL_FROM_S_MODE


def test_trap_info_equality():
    assert TrapInfo(mepc=0x80000000) == TrapInfo(mepc=0x80000000)
    assert TrapInfo(gva=True) != TrapInfo()