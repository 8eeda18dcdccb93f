# setup.py
from setuptools import setup, find_packages

setup(
    name="laplace_minimax",
    version="0.1.0",
    description="Minimax exponential-sum approximation of 1/x in quad precision",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"laplace_minimax": ["data/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        "mpmath",
        "matplotlib",
        "numpy",
        "scipy",
    ],
    extras_require={
        "test": ["pytest", "sympy"],
    },
    entry_points={
        "console_scripts": [
            "laplace-minimax = laplace_minimax.cli:main",
        ],
    },
)
