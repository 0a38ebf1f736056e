#!/usr/bin/env python3
import os
from setuptools import setup, find_packages


def read_requirements(app_dir):
    """Read runtime dependencies from req/requirements.txt"""
    requirements_path = os.path.join(app_dir, "req", "requirements.txt")
    with open(requirements_path) as f:
        return [line.strip() for line in f if line.strip() and not line.startswith("#")]


app_dir = os.path.dirname(os.path.abspath(__file__))

setup(
    name="socketio-protocol-client",
    version="0.1.0",
    description="Socket.IO protocol client over websockets",
    packages=find_packages(include=["socketio_client", "socketio_client.*", "utils", "config"]),
    python_requires=">=3.9",
    install_requires=read_requirements(app_dir),
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "socketio-client=socketio_client.client:main",
        ],
    },
)
