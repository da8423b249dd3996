[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "roxy"
version = "0.1.0"
description = "Asyncio building blocks for a Shadowsocks AEAD client: cipher kinds, address codec, encrypted TCP streams, replay protection and cron parsing"
requires-python = ">=3.10"
keywords = ["shadowsocks", "proxy", "aead", "socks5", "cron", "asyncio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "pycryptodome",
    "dnspython",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["roxy"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
