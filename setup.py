"""
Setuptools build script for shellexa.

This file allows installation of the ``shellexa`` package via
``pip install .``.  It declares the required dependencies and
registers a console script entry point named ``shellexa``.  When
installed, users can invoke the CLI with ``shellexa`` from their shell.

Install the ``test`` extra (``pip install -e .[test]``) to run the
test suite.
"""

from setuptools import setup, find_packages

setup(
    name="shellexa",
    version="0.1.0",
    description="Turn natural language requests into shell commands you confirm before they run",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",
        "PyYAML>=5.4",
        "requests>=2.25",
        "ollama>=0.4",
        "fastapi>=0.80",
        "uvicorn>=0.20",
        "httpx>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "shellexa=shellexa.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
