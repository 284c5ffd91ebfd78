"""
OPR Digital - One Page Report lifecycle, export and sync
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

with open("requirements-dev.txt", "r", encoding="utf-8") as fh:
    dev_requirements = [
        line.strip() for line in fh if line.strip() and not line.startswith("#") and not line.startswith("-r")
    ]

setup(
    name="opr-digital",
    version="0.1.0",
    author="SMA MAIWP Labuan",
    description="One Page Report (OPR) composition, PDF export and cloud sync",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={"test": dev_requirements},
    entry_points={
        "console_scripts": [
            "opr=core.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "d6_reports": ["templates/*.html", "templates/*.css"],
    },
)
