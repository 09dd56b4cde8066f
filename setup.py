
from setuptools import setup, find_packages

setup(
    name="paprov",
    version="1.0.0",
    description="Private-allele screening of candidate source populations",
    long_description="Identifies plausible source populations for an individual of unknown provenance from SNP genotypes, using loci at which it carries alleles absent from each population",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
    'numpy>=1.24.4',
    'pandas>=2.0.3',
    'click>=8.1',
    'pyyaml>=6.0',
    'cyvcf2>=0.30',
    'matplotlib>=3.7.5',
    'seaborn>=0.13.2',
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "paprov=paprov.cli.main:cli",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    )
