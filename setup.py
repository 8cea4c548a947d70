from setuptools import setup, find_packages
from version import version


with open("README.rst") as f:
    long_description = f.read()

setup(
    name="PushSeq",
    version=version,
    description="Lazy push-based sequences with early termination and resource-safe adapters",
    long_description=long_description,
    keywords=['iterator', 'lazy', 'sequence', 'pipeline', 'combinators'],
    license="Mozilla Public License 2.0 (MPL 2.0)",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Development Status :: 3 - Alpha",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Intended Audience :: Developers"],
    packages=find_packages(exclude=["tests", "docs"]),
    python_requires=">=3.8",
    install_requires=[
        'tblib',
        'ijson>=3.1'],
    extras_require={
        'tests': [
            'pytest', 'pytest-timeout', 'coverage']
    }
)
