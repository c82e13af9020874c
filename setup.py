#!/usr/bin/env python3
"""DeployKit CLI - Setup"""

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="deploykit",
    version="1.0.0",
    description="Run Deployer deployments over an ephemeral, self-cleaning SSH session",
    author="DeployKit Team",
    packages=find_packages(include=["deploykit", "deploykit.*"]),
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "deploykit=deploykit.main:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
