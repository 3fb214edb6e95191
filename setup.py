from setuptools import setup, find_packages

setup(
    name="userdesk",
    version="0.1.0",
    description="Command-line user management against a REST users endpoint",
    packages=find_packages(include=["userdesk", "userdesk.*"]),
    python_requires=">=3.11",
    install_requires=[
        "click>=8.0",
        "httpx>=0.24",
        "pydantic>=2.0",
        "tomli>=2.0",
        "tomli-w>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "userdesk=userdesk.cli:cli",
        ],
    },
)
