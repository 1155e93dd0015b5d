"""Setup script for the netkeeper package."""

from setuptools import find_packages, setup

setup(
    name="netkeeper",
    version="0.1.0",
    description="Link-state reconciliation daemon keeping a network interface connected",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "paho-mqtt>=2.0.0",
        "rich",
        "inotify_simple",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "netkeeper=netkeeper.link_manager:main",
            "netkeeper-status=netkeeper.link_manager:status_main",
        ],
    },
)
