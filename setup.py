"""Setup file for tableconv package."""

from setuptools import setup

setup(
    name="tableconv",
    version="0.1.0",
    description="Convert, locate, replace and style tables across HTML, CSV and JSON",
    author="Your Name",
    packages=["tableconv", "tableconv.stages"],
    package_dir={"tableconv": "."},
    python_requires=">=3.8",
    install_requires=[
        "requests",
        "beautifulsoup4",
        "soupsieve",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "tableconv=tableconv.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
