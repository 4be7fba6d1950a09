from setuptools import setup, find_packages

setup(
    name="forum-monitor",
    version="1.0.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "aiohttp>=3.13.3",
        "aiofiles>=23.2.1",
        "beautifulsoup4>=4.12.0",
        "lxml>=4.9.0",
        "httpx>=0.27.0",
        "orjson>=3.9.0",
        "playwright>=1.40.0",
        "python-dotenv>=1.0.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "forum-monitor=forum_monitor.cli:main",
        ],
    },
    python_requires=">=3.10",
)
