from setuptools import setup, find_packages

setup(
    name="chatproxy",
    version="0.1.0",
    packages=find_packages(include=["chatproxy", "chatproxy.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.115",
        "uvicorn[standard]>=0.30",
        "httpx>=0.27",
        "pydantic>=2.7",
        "pydantic-settings>=2.3",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "itsdangerous>=2.1",
        "redis>=5.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "respx>=0.21",
            "aiosqlite>=0.20",
        ],
    },
)
