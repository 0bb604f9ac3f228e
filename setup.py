from setuptools import setup, find_packages

setup(
    name="ark-blockstore",
    version="0.1.0",
    packages=find_packages(include=["blockstore", "blockstore.*"]),
    install_requires=[
        "boto3>=1.26.0",
        "botocore>=1.29.0",
        "google-auth>=2.0.0",
        "google-api-core>=2.10.0",
        "google-cloud-compute>=1.11.0",
        "python-dotenv>=0.19.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.8",
)
