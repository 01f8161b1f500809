"""Setup configuration for CogSage - Cognitive Message Pipeline"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="cogsage",
    version="0.1.0",
    author="CogSage contributors",
    description="CogSage: conversational assistant with a cognitive message pipeline",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/cogsage/cogsage",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=[
        "beautifulsoup4>=4.12.0",
        "requests>=2.31.0",
        "lxml>=4.9.0",
        "ddgs>=0.0.1",
        "colorama>=0.4.6",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "cogsage=cogsage.cli:main",
        ],
    },
)
