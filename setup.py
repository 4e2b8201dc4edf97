from setuptools import setup, find_packages

setup(
    name="eduvibe",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*", "alembic", "alembic.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "passlib[bcrypt]",
        "bcrypt<4.1",  # passlib reads bcrypt.__about__, removed in later releases
        "python-multipart",
        "pydantic[email]",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
        "numpy",
        "scikit-learn",
    ],
    extras_require={
        "test": ["pytest", "httpx"],
    },
)
