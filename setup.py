"""
setup.py

rich-text-resolver - transforms rich-text markup into portable-text blocks and back
"""

from typing import List, Optional, Union

from setuptools import find_packages, setup

from rich_text_resolver.__version__ import __version__


def load_requirements(file_list: Optional[Union[str, List[str]]] = None) -> List[str]:
    if file_list is None:
        file_list = ["requirements/base.in"]
    if isinstance(file_list, str):
        file_list = [file_list]
    requirements: List[str] = []
    for file in file_list:
        with open(file, encoding="utf-8") as f:
            requirements.extend(line.strip() for line in f.readlines())
    requirements = [
        req for req in requirements if req and not req.startswith("#") and not req.startswith("-")
    ]
    return requirements


setup(
    name="rich-text-resolver",
    description="Transforms rich-text markup into portable-text blocks and renders them back.",
    long_description=open("README.md", encoding="utf-8").read(),  # noqa: SIM115
    long_description_content_type="text/markdown",
    keywords="rich text portable text HTML parsing CMS",
    python_requires=">=3.9.0",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Text Processing :: Markup :: HTML",
    ],
    packages=find_packages(include=["rich_text_resolver", "rich_text_resolver.*"]),
    version=__version__,
    install_requires=load_requirements(),
    extras_require={
        "test": load_requirements("requirements/test.in"),
    },
    entry_points={
        "console_scripts": ["rich-text-resolver=rich_text_resolver.cli:_main"],
    },
    package_dir={"rich_text_resolver": "rich_text_resolver"},
    package_data={"rich_text_resolver": ["py.typed"]},
)
