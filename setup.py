# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="zinja",
    version="0.1.0",
    description="A Jinja template engine with a tree-walking interpreter",
    packages=find_namespace_packages(include=["zinja", "zinja.*"]),
    python_requires=">=3.10",
    install_requires=[],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)
