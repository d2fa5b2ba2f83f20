# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="depmap4ai",
    version="0.1.0",
    description="Collects the project-internal dependency closure of an Android source file into an LLM-ready context",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["depmap4ai*"]),
    python_requires=">=3.9",
    install_requires=[
        "tiktoken",  # Token estimate of the combined artifact
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'depmap4ai=depmap4ai.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
