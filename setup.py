from setuptools import setup, find_packages

setup(
    name="adaptnum",
    version="0.1.0",
    description="Adaptive quadrature, Romberg extrapolation and adaptive Runge-Kutta ODE integration",
    author="adamfilli",
    packages=find_packages(include=["adaptnum", "adaptnum.*"]),
    install_requires=[
        "numpy",
        "pandas",
    ],
    extras_require={
        "test": [
            "pytest",
            "matplotlib",
        ],
    },
    include_package_data=True,
    python_requires=">=3.10",
)
