from setuptools import setup, find_packages

setup(
    name="vitrine",
    version="1.0.0",
    packages=find_packages(include=["vitrine", "vitrine.*"]),
    install_requires=[
        "django>=4.2",
        "djangorestframework",
        "drf-spectacular",
        "djangorestframework-simplejwt",
        "psycopg2-binary",
        "python-decouple",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-django",
        ],
    },
    python_requires=">=3.11",
)
