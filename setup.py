from setuptools import setup, find_packages

setup(
    name="agent-workflow-runner",
    version="0.1.0",
    description="Runs declarative AI agent workflows with pluggable tools",
    author="MCP Team",
    packages=find_packages(exclude=["*.tests", "*.tests.*", "tests"]),
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
        "click>=8.0.0",
        "GitPython>=3.1.0",
        "httpx>=0.24.0",
        "mcp>=1.0.0,<2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=22.0.0",
            "isort>=5.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "agent-runner=agent_core.main:main",
            "agent-tool-server=server.tool_server:main",
        ],
    },
    python_requires=">=3.11",
)
