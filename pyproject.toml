[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gatewaykit"
version = "0.1.0"
description = "Helpers for Gateway API routes, gateway policy references, Istio mesh configuration and manifest decoding"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["gateway-api", "istio", "kubernetes", "envoy", "policy", "yaml"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gatewaykit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
