[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "aisdk"
version = "0.1.0"
description = "Building blocks for chat-completion AI clients: messages, tool calling, multi-step workflows, streaming, retries and logging"
requires-python = ">=3.10"
dependencies = []
keywords = ["ai", "llm", "openai", "chat", "tool-calling", "streaming", "server-sent-events"]
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
    "Topic :: Software Development :: Libraries",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["aisdk"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
