from setuptools import setup, find_packages

setup(
    name="incjc",
    version="1.0.0",
    description="Incremental Java compilation driver",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-cov",
            "coverage",
        ],
    },
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "incjc=incjc.cli:run",
        ],
    },
)
