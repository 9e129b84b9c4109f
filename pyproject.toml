[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "miralis"
version = "0.1.0"
description = "Pure-Python models of RISC-V machine-mode state: registers, CSRs, trap causes and physical memory protection"
requires-python = ">=3.10"
dependencies = []
keywords = ["risc-v", "pmp", "csr", "mcause", "virtualization", "firmware"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["miralis"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
