#!/usr/bin/env python3

import sys
from pathlib import Path

from setuptools import setup, find_packages

REQUIRED_MAJOR = 3
REQUIRED_MINOR = 8

ROOT_DIR = Path(__file__).parent.resolve()
ENCODING = "utf-8"


def _get_version() -> str:
    version_file = ROOT_DIR.joinpath("blobchannel").joinpath("version.py")
    with open(version_file, encoding=ENCODING) as file:
        for line in file.read().splitlines():
            if line.startswith("__version__"):
                delim = '"' if '"' in line else "'"
                version = line.split(delim)[1]
                print("Setup detected blobchannel version:", version)
                return version
    raise RuntimeError(f"Unable to find version string in {version_file}")


# Check for python version
if sys.version_info < (REQUIRED_MAJOR, REQUIRED_MINOR):
    error = (
        "Your version of python ({major}.{minor}) is too old. You need "
        "python >= {required_major}.{required_minor}."
    ).format(
        major=sys.version_info.major,
        minor=sys.version_info.minor,
        required_minor=REQUIRED_MINOR,
        required_major=REQUIRED_MAJOR,
    )
    sys.exit(error)

# Read in README.md for our long_description
with open(ROOT_DIR.joinpath("README.md"), encoding=ENCODING) as f:
    long_description = f.read()

setup(
    name="blobchannel",
    version=_get_version(),
    description="Chunked, retrying and resumable read channels over ranged object downloads.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    keywords=[
        "Object Storage",
        "Google Cloud Storage",
        "Streaming",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: System :: Networking",
    ],
    license="MIT",
    python_requires=">=3.8",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "requests",
        "urllib3",
        "tenacity",
        "pydantic>=2",
        "msgspec",
        "overrides",
        "humanize",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
