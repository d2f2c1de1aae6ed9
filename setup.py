from setuptools import find_packages, setup

setup(
    name="espchip",
    version="1.0.0",
    description="Chip identification layer for Espressif SoC flashing tools",
    license="GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=find_packages(include=["espchip", "espchip.*"]),
    install_requires=[
        "bitstring>=4.0",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
)
