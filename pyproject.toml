[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghtp"
version = "0.1.0"
description = "Run a Terraform or OpenTofu plan and write its output as collapsible GitHub Flavored Markdown."
requires-python = ">=3.11"
keywords = ["terraform", "opentofu", "plan", "markdown", "github", "pull-request"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]
dependencies = [
    "click",
    "tomlkit",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tp = "ghtp.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ghtp"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
