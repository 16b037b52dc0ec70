"""
Copyright 2023 - present, Soof Golan.

Licensed under the MIT License.

The postgres binaries are not built here; they are downloaded at install()
time from a maven repository and cached per version and platform.
"""


import setuptools

setuptools.setup(
    name="embedded-postgres",
    version="0.1.0",
    description="Download, run and tear down a throwaway postgres server",
    packages=setuptools.find_packages(include=["embedded_postgres*"]),
    python_requires=">=3.9",
    install_requires=[
        "httpx",
        "pg8000",
        "pydantic>=2",
        "pydantic-settings>=2",
        "retry",
        "typer",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "embedded-postgres=embedded_postgres.__main__:main",
        ],
    },
)
