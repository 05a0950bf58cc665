[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rolemesh"
version = "0.1.0"
description = "Multiparty protocols between asynchronous roles, with worked protocols and a role-based HTTP cache"
requires-python = ">=3.10"
keywords = [
    "session types",
    "multiparty",
    "protocols",
    "asyncio",
    "roles",
    "fft",
    "http cache",
    "redis",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
    "Topic :: Internet :: Proxy Servers",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "aiohttp>=3.8",
    "redis>=4.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7",
    "pytest-asyncio>=0.21",
]

[project.scripts]
rolemesh-cache = "rolemesh.caching.server:main"

[tool.hatch.build.targets.wheel]
packages = ["rolemesh"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
