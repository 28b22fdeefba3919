import setuptools
import os
import re

with open(os.path.join("cloudobjects", "__init__.py")) as fp:
    version = re.search(r'^__version__ = "([^"]+)"', fp.read(), re.M).group(1)

long_description = ""
if os.path.exists("README.md"):
    with open("README.md", "r") as fh:
        long_description = fh.read()

setuptools.setup(
    name="cloudobjects",
    version=version,
    description="Object wrappers for creating, reading, updating and deleting AWS IAM roles and policies",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=['test']),
    include_package_data=False,
    python_requires=">=3.8",
    install_requires=[
        "boto3",
        "botocore",
    ],
    extras_require={
        "test": [
            "moto>=5",
            "pytest",
        ],
    },
    keywords="aws iam boto3 role policy arn",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
