#!/usr/bin/env python3
"""
Setup configuration for LyricType
A typing game engine and song queue driven by song lyrics
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "lyricsgenius>=3.0.1",
    "colorama>=0.4.6",
    "python-dotenv>=1.0.0",
    "asyncio-throttle>=1.0.2",
]

setup(
    name="lyrictype",
    version="0.4.0",
    author="LyricType Team",
    description="Typing test engine and song queue for lyrics-based typing practice",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["lyrictype", "lyrictype.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Games/Entertainment",
        "Topic :: Education",
    ],
    python_requires=">=3.10",
    install_requires=core_requirements,
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lyrictype=lyrictype.main:cli",
        ],
    },
    include_package_data=True,
    keywords="typing game lyrics wpm genius cli",
)
