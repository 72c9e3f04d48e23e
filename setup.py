from setuptools import find_packages, setup

setup(
    name="mac-checkup",
    version="0.3.0",
    description="Mac health checkup and safe disk cleanup from the terminal",
    python_requires=">=3.11",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "result>=0.17",
        "rich>=13.7",
        "psutil>=5.9",
        "Send2Trash>=1.8",
        "typing_extensions>=4.4; python_version < '3.12'",
    ],
    extras_require={
        "test": ["pytest>=8.0"],
    },
    entry_points={
        "console_scripts": [
            "mac-checkup=checkup.cli:main",
        ],
    },
)
