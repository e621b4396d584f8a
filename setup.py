from setuptools import setup, find_packages

setup(
    name="survivor-stats",
    version="0.1.0",
    description="Snapshot archival, episode diffing and time-series analytics for elimination competitions",
    author="Ben Rosen",
    packages=find_packages(include=["survivor_stats", "survivor_stats.*"]),
    install_requires=[
        "numpy>=1.22.4",
        "pandas>=1.5.3",
        "scipy>=1.10.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "survivor-stats=survivor_stats.main:main",
        ],
    },
)
