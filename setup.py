"""Setup script for ondeestou package."""

from setuptools import setup, find_packages

setup(
    name="ondeestou",
    version="0.7.0",
    description="Position-triggered reverse geocoding with prioritized spoken address notifications",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ondeestou=ondeestou.main:main",
        ],
    },
)
