"""Models of RISC-V registers, CSRs, trap causes and physical memory protection."""

__version__ = "0.1.0"