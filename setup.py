#!/usr/bin/env python
"""samdeploy — interactive wizard for packaging and deploying AWS SAM applications."""

from setuptools import find_packages, setup

VERSION = "0.1.0b1"
CLASSIFIERS = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "License :: OSI Approved :: MIT License",
]

DEPENDENCIES = [
    # CLIError for user-facing failures
    "knack>=0.11.0",
    "pyyaml>=6.0",
    "rich>=13.0.0",
]

TEST_DEPENDENCIES = [
    "pytest>=7.0",
]

setup(
    name="samdeploy",
    version=VERSION,
    description="Wizard-driven packaging and deployment of AWS SAM applications",
    long_description="Walks the user through template, parameter overrides, region, S3 bucket "
    "and stack name, then packages and deploys the application with the SAM CLI.",
    license="MIT",
    classifiers=CLASSIFIERS,
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=DEPENDENCIES,
    extras_require={
        "test": TEST_DEPENDENCIES,
    },
)
