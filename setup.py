"""
Setuptools build script for howtfdoi.

This file allows installation of the ``howtfdoi`` package via
``pip install .``.  It declares the required dependencies and
registers a console script entry point named ``howtfdoi``.  When
installed, users can invoke the CLI with ``howtfdoi`` from their
shell.

Install with ``pip install -e .[test]`` to also get the test tools.
"""

from setuptools import setup, find_packages

setup(
    name="howtfdoi",
    version="1.0.4",
    description="Ask CLI questions in plain English and get shell commands back from an LLM",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=8.0",
        "PyYAML>=5.4",
        "anthropic>=0.40",
        "openai>=1.0",
        "pyperclip>=1.8",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "howtfdoi=howtfdoi.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
