import re
import pathlib
from setuptools import setup, find_packages

with open("README.md", mode="r", encoding="utf-8") as f:
    readme = f.read()

# parse the version instead of importing it to avoid dependency-related crashes
with open("src/_gitrepo/__version.py", mode="r", encoding="utf-8") as f:
    line = f.readline()
    __version__ = line.split("=")[1].strip(" '\"\n")
    assert re.match(
        r"^\d+(\.\d+){2}(-(alpha|beta|rc|dev)(\.\d+)?)?$", __version__
    )


def read_requirements(requirements_file_name: str) -> list[str]:
    """Read requirements from a file, stripping comments and empty lines."""
    content = (
        pathlib.Path(__file__).parent / "requirements" / requirements_file_name
    ).read_text(encoding="utf8")
    return [
        stripped_req
        for req in content.splitlines()
        if (stripped_req := req.strip()) and not stripped_req.startswith("#")
    ]


dev_requirements = read_requirements("requirements.dev.txt")

setup(
    name="gitrepo",
    version=__version__,
    description=(
        "Clone and inspect Git repositories through the git executable"
    ),
    long_description=readme,
    long_description_content_type="text/markdown",
    author="gitrepo developers",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src", exclude=("tests", "docs")),
    py_modules=["gitrepo"],
    tests_require=dev_requirements,
    install_requires=read_requirements("requirements.txt"),
    extras_require=dict(DEV=dev_requirements, TEST=dev_requirements),
    entry_points=dict(console_scripts="gitrepo = gitrepo:main"),
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: Implementation :: CPython",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
    ],
)
