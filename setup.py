#!/usr/bin/env python
"""pgiter.

    Memory-bounded iteration over PostgreSQL results with server-side cursors.
See:
https://github.com/pgiter/pgiter
"""
from os import path

from setuptools import find_packages, setup


def get_path(filename):
    return path.join(path.dirname(path.abspath(__file__)), filename)


version = get_path('pgiter/version.py')
with open(version, 'r', encoding='utf-8') as meta:
    # exec the version module
    t = compile(meta.read(), version, 'exec', dont_inherit=True)
    exec(t)


if __name__ == "__main__":
    setup(
        name=__title__,  # noqa: F821 pylint: disable=E0602
        version=__version__,  # noqa: F821 pylint: disable=E0602
        description=__description__,  # noqa: F821 pylint: disable=E0602
        author=__author__,  # noqa: F821 pylint: disable=E0602
        author_email=__author_email__,  # noqa: F821 pylint: disable=E0602
        license=__license__,  # noqa: F821 pylint: disable=E0602
        python_requires=">=3.10",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "Framework :: AsyncIO",
            "Topic :: Database :: Front-Ends",
            "License :: OSI Approved :: BSD License",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
        ],
        packages=find_packages(exclude=["contrib", "docs", "tests", "examples"]),
        install_requires=[
            "asyncpg>=0.29.0",
            "uvloop>=0.19.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.2.0",
                "pytest-asyncio>=0.21.0",
                "pytest-assume>=2.4.3",
            ]
        },
        zip_safe=False,
    )
