from setuptools import setup, find_namespace_packages

setup(
    name="bookswap",
    version="0.1.0",
    packages=find_namespace_packages(include=['cli*', 'bookswap*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest"],
        "postgres": ["psycopg2-binary"],
    },
    entry_points={
        "console_scripts": [
            "bookswap=cli.main:main",
        ],
    },
)
