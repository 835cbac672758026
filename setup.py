from setuptools import setup, find_packages

setup(
    name="kuppi-backoffice",
    version="0.1.0",
    packages=find_packages(include=["backoffice", "backoffice.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "starlette>=0.36",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.2",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "aiosqlite>=0.19",
        "httpx>=0.26",
        "python-jose[cryptography]>=3.3",
        "cryptography>=42.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "respx>=0.20",
        ],
    },
)
