"""
Setup script for rfi-trainer.

RFI Trainer is a terminal drill for pre-flop "raise first in" opening
ranges. It serves two roles:

1. Drill Companion - Quick adaptive quiz sessions from the terminal
2. Range Reference - Chart and evaluate any position/hand pair

The 'rfi' command is the primary entry point.
"""

from setuptools import find_packages, setup

setup(
    name="rfi-trainer",
    version="1.0.0",
    description="Terminal drill for pre-flop opening ranges with spaced repetition",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["src", "src.*"]),
    py_modules=["config"],
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "rfi=src.trainer.cli:main",
        ],
    },
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
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="poker preflop ranges spaced-repetition cli trainer",
)
