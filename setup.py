# setup.py
from setuptools import setup, find_packages

setup(
    name="mtdb",
    version="0.1.0",
    description="Multi-backend persistence for game server accounts, privileges and mod storage",
    packages=find_packages(
        exclude=(
            "tests",
            "tests.*",
            "docs",
            "build",
            "dist",
        )
    ),
    install_requires=[
        "psycopg2-binary>=2.9",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    python_requires=">=3.10",
)
