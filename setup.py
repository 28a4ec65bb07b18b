"""
Setup file.
"""

import os

from setuptools import find_packages, setup

KEYWORDS = "java javac compiler diagnostics build toolchain in-process fork"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="javacbridge",
        version="0.1.0",
        description="Run javac-style compilers and parse their diagnostics",
        keywords=KEYWORDS,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[
            "psutil",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "javacbridge=javacbridge.cli:main",
            ],
        },
        include_package_data=True)
