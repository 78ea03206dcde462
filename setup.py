from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="zkcred-toolkit",
    version="0.1.0",
    description="Camenisch-Lysyanskaya anonymous credentials with a libp2p/trio exchange protocol (experimental)",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"zkcred": ["data/*.yml"]},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security :: Cryptography",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    python_requires=">=3.9",
    install_requires=[
        "libp2p>=0.2.0,<0.7",
        "trio>=0.27.0",
        "multiaddr>=0.0.9",
        "cbor2>=5.6.0",
        "petlib>=0.0.45",
        "click>=8.1.0",
        "rich>=13.0.0",
        "pyyaml>=6.0",
        "redis>=5.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.0.0",
            "pytest-trio>=0.8.0",
            "black>=24.0.0",
            "flake8>=7.0.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "zkcred=zkcred.cli:main",
        ],
    },
)
