"""
TrekPrep setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="trekprep",
    version="1.0.0",
    description="TrekPrep — Pre-expedition operational checklists for trekking trips",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "trekprep=trekprep.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "httpx>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
