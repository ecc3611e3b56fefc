#!/usr/bin/env python
# -*- coding: utf-8 -*-
import codecs
import os

from setuptools import find_packages, setup

here = os.path.abspath(os.path.dirname(__file__))

with codecs.open(os.path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = "\n" + f.read()

about = {}

with open(os.path.join(here, "apiresponder", "__version__.py")) as f:
    exec(f.read(), about)

required = [
    "chardet",
    "requests",
    "requests-toolbelt",
    "rfc3986",
    "starlette[full]",
    "uvicorn[standard]",
]


setup(
    name="apiresponder",
    version=about["__version__"],
    description="JSON and XML API controllers for ASGI services.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "examples"]),
    package_data={},
    python_requires=">=3.8",
    setup_requires=[],
    install_requires=required,
    extras_require={
        "cli": ["docopt-ng"],
        "develop": [
            "poethepoet",
            "pyproject-fmt",
            "ruff",
            "validate-pyproject",
        ],
        "release": ["build", "twine"],
        "test": ["docopt-ng", "pytest", "pytest-cov", "pytest-mock"],
    },
    entry_points={"console_scripts": ["apiresponder=apiresponder.cli:cli"]},
    include_package_data=True,
    license="Apache 2.0",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Internet :: WWW/HTTP",
    ],
)
