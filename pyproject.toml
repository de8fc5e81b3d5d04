[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "heliolite"
version = "0.2.0"
description = "Verifying building blocks for an Ethereum light client: SSZ roots, Merkle branches, RLP, Merkle-Patricia proofs and checked execution data"
requires-python = ">=3.10"
keywords = ["ethereum", "light-client", "merkle", "ssz", "rlp", "proof", "beacon"]
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
    "Topic :: Internet",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "pycryptodome",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["heliolite"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
