#!/usr/bin/env python3
"""
Setup script for WebInk.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="webink",
    version="0.2.0",
    description="Async active-record ORM for SQLite and MySQL",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="WebInk Contributors",
    packages=find_packages(include=["webink", "webink.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "aiosqlite>=0.19.0",
        "aiomysql>=0.2.0",
        "click>=8.1.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "webink=webink.cli.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Database :: Front-Ends",
    ],
    keywords="orm async sqlite mysql active-record",
)
