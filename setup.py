from setuptools import setup, find_packages


setup(
    name="sbunpack",
    version="0.1",
    packages=find_packages(),
    description="Recover Scratch projects (sb, sb2, sb3) from packaged HTML and zip files.",
    author="vercingetorx",
    install_requires=[],
    entry_points={
        "console_scripts": [
            "sbunpack=sbunpack.cli:main",
        ]
    },
)
