from setuptools import setup, find_packages

setup(
    name="check-azkaban",
    version="0.1.0",
    description="Nagios check plugin for the Azkaban workflow scheduler",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "tomli>=2.0.1; python_version < '3.11'",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.3",
            "hypothesis>=6.92.1",
        ],
    },
    entry_points={
        "console_scripts": [
            "check_azkaban=check_azkaban.cli:main",
        ],
    },
)
