from setuptools import setup, find_packages

setup(
    name="flux-budyko",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    install_requires=[
        "numpy>=1.21.0",
        "pandas>=1.5.0",
        "scipy>=1.7.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "flux-budyko=flux_budyko.cli:main",
        ],
    },
    author="flux-budyko contributors",
    description="PET estimation and Budyko water-balance analysis for flux-tower sites",
    python_requires=">=3.8",
)
