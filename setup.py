from setuptools import setup, find_namespace_packages

setup(
    name="baseplate-api",
    version="0.1.0",
    packages=find_namespace_packages(include=["src.baseplate", "src.baseplate.*"]),
    package_data={"src.baseplate.core": ["system_modules.yaml"]},
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
        "python-jose[cryptography]",
        "pyyaml",
        "supabase",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
            "aiosqlite",
        ],
    },
)
