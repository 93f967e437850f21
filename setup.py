# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="orgwalk",
    version="1.0.0",
    description="Export a directory user's full reporting hierarchy as CSV",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["orgwalk", "orgwalk.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.28",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        'console_scripts': [
            'orgwalk=orgwalk.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
