[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cogniflight"
version = "0.1.0"
description = "Authentication backend for Cogniflight: logins, sessions and invitation-based sign-up over MongoDB."
requires-python = ">=3.10"
keywords = ["authentication", "sessions", "signup", "flask", "mongodb", "bcrypt"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.3",
    "pymongo>=4.0",
    "bcrypt>=4.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
cogniflight-server = "cogniflight.server:main"

[tool.hatch.build.targets.wheel]
packages = ["cogniflight"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
