from setuptools import setup, find_packages
from pathlib import Path

# Read the README file
readme_path = Path("README.md")
long_description = readme_path.read_text(encoding="utf-8")

# Read requirements file
requirements_path = Path("requirements.txt")
requirements = [
    line.strip()
    for line in requirements_path.read_text(encoding="utf-8").splitlines()
    if line.strip() and not line.startswith("#")
]

setup(
    name="printwatch",
    version="0.3.0",
    description="SNMP printer discovery and page counter polling, with Ricoh device profiling",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["printwatch", "printwatch.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: System :: Networking :: Monitoring",
        "Topic :: Printing",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        'console_scripts': ['printwatch=printwatch.cli:main']
    },
)
