"""Setup configuration for runner-harness."""

from setuptools import setup, find_packages

setup(
    name="runner-harness",
    version="0.1.0",
    description="Harness for driving an external test runner and validating its results",
    packages=find_packages(include=["runner_harness", "runner_harness.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "runner-harness=runner_harness.cli:main",
        ],
    },
)
