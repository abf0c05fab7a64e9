#!/usr/bin/env python

from setuptools import setup


VERSION = "0.1a1"

setup(
    name="sprig",
    version=VERSION,
    description="An XML parser and a mutable node tree with path and CSS queries.",
    license="AGPL-3.0-or-later",
    packages=[
        "_sprig",
        "_sprig.parser",
        "_sprig.plugins",
        "_sprig.query",
        "sprig",
    ],
    python_requires=">=3.10",
    install_requires=["cssselect", "lxml"],
    extras_require={
        "web-loader": ["httpx"],
        "test": ["httpx", "pytest", "pytest-httpx"],
    },
)
