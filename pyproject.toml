[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "apkdecompiler"
version = "0.1.0"
description = "Read APK and XAPK archives: DEX classes, methods, fields, Dalvik bytecode and resource string tables"
requires-python = ">=3.10"
dependencies = []
keywords = ["android", "apk", "xapk", "dex", "dalvik", "smali", "arsc", "protobuf", "decompiler"]
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
    "Topic :: Software Development :: Disassemblers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["apkdecompiler"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
