# setup.py
from setuptools import setup, find_packages

setup(
    name="site_qa",
    version="0.1.0",
    description="SiteQA: sitemap-driven headless health scanner for websites",
    packages=find_packages(include=["site_qa", "site_qa.*"]),
    package_data={"site_qa": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "Jinja2>=3.1",
        "lxml>=5.0",
        "Pillow>=10.0",
        "playwright>=1.40",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site-qa=site_qa.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
