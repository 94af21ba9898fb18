from setuptools import setup, find_packages
from pathlib import Path

# Read the README file for the long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="dbfs",
    version="0.1.0",
    description="Browse and mount relational databases as read-only filesystems",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        "console_scripts": [
            "dbfs=dbfs.cli:app"
        ],
    },
    install_requires=[
        "typer>=0.9.0",
        "rich>=13.0.0",
        "SQLAlchemy>=2.0.0",
        "fusepy>=3.0.1",
    ],
    extras_require={
        # Database drivers
        "mysql": [
            "PyMySQL>=1.0.0",
        ],
        "postgresql": [
            "psycopg2-binary>=2.9.0",
        ],
        "all": [
            "PyMySQL>=1.0.0",
            "psycopg2-binary>=2.9.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: System :: Filesystems",
        "Topic :: Database",
    ],
    python_requires='>=3.9',
)
