# setup.py
from setuptools import setup, find_packages

setup(
    name="scouter",
    version="0.1.0",
    description="Асинхронный поисковый краулер Scouter: обход страниц по приоритету для одного запроса",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"scouter.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "openai>=1.30",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["scouter=scouter.cli:cli"],
    },
    python_requires=">=3.11",
)
