# setup.py
"""Setup script for gz-sieve."""

import os

from setuptools import setup, find_packages

setup(
    name="gz-sieve",
    version="1.0.0",
    description="Remove lines matching literal substrings from gzip-compressed logs, in place and in parallel",
    long_description=open("README.md").read() if os.path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="gz-sieve developers",
    packages=find_packages(exclude=["gz_sieve.tests", "gz_sieve.tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "tqdm>=4.50.0",
        "babel>=2.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=2.10.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gz-sieve=gz_sieve.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: System :: Logging",
        "Topic :: System :: Archiving :: Compression",
    ],
)
