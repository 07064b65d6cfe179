[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "regxact"
version = "0.1.0"
description = "Read register maps from IP-XACT and register-documentation XHTML into a component/register/bitfield model"
requires-python = ">=3.10"
dependencies = []
keywords = ["ip-xact", "registers", "bitfields", "register map", "embedded", "xhtml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Topic :: Text Processing :: Markup :: XML",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["regxact"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
