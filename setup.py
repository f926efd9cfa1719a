#!/usr/bin/env python

from setuptools import find_packages, setup

from slugcascade import __version__

install_requires = [
    "Django>=3.2,<6.0",
    "asgiref>=3.5",
]

testing_extras = [
    "pytest>=7.0",
    "pytest-django>=4.5",
    "freezegun>=1.2",
]

setup(
    name="slugcascade",
    version=__version__,
    description="Automatic redirects and sub-page slug updates when a page slug changes",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    license="BSD",
    packages=find_packages(exclude=["docs", "docs.*"]),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require={"testing": testing_extras},
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Framework :: Django",
        "Topic :: Internet :: WWW/HTTP :: Site Management",
    ],
    zip_safe=False,
)
