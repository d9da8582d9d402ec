"""
Setup script for pubsubhub
"""
from setuptools import setup, find_packages

setup(
    name="pubsubhub",
    version="0.1.0",
    packages=find_packages(include=["pubsubhub", "pubsubhub.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi>=0.115.0",
        "uvicorn>=0.30.0",
        "pydantic>=2.8.0",
        "python-dotenv>=1.0.1",
        "httpx>=0.27.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    description="PubSubHubBub (WebSub) subscriber - hub callback endpoint and subscription client",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
