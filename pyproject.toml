[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "duetmpc"
version = "0.1.0"
description = "Two-party secure computation building blocks: secret-shared matrices, share translation, secret-shared shuffle and Paillier encryption."
requires-python = ">=3.10"
keywords = [
    "mpc",
    "secure-computation",
    "secret-sharing",
    "shuffle",
    "paillier",
    "privacy",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "numpy",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["duetmpc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
