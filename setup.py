from setuptools import setup, find_namespace_packages
from pathlib import Path

setup(
    name="lumiose_map",
    version=Path("./lumiose_map/VERSION").read_text().strip(),
    packages=find_namespace_packages(include=["lumiose_map", "lumiose_map.*"]),
    package_data={"lumiose_map": ["VERSION"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "easydict",
        "httpx",
        "platformdirs",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["lumiose_map=lumiose_map.cli:main"],
    },
)
