#!/usr/bin/env python3
import os
from setuptools import setup, find_packages

app_dir = os.path.dirname(os.path.abspath(__file__))


def read_version():
    """Read __version__ from the package without importing it."""
    with open(os.path.join(app_dir, "sockettester", "__init__.py")) as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=", 1)[1].strip().strip('"\'')
    raise RuntimeError("Unable to find __version__")


setup(
    name="socket-tester",
    version=read_version(),
    description="Interactive testing client for Socket.IO servers",
    packages=find_packages(include=["sockettester", "sockettester.*"]),
    python_requires=">=3.10",
    install_requires=[
        "python-socketio[asyncio_client]>=5.12",
        "aiohttp",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "socket-tester=sockettester.cli:main",
        ],
    },
)
