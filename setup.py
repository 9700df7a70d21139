import logging
import os
import re

import setuptools

logger = logging.getLogger(__name__)

ROOT_DIR = os.path.dirname(__file__)


def find_version(*paths):
    version_file_path = os.path.join(ROOT_DIR, *paths)
    with open(version_file_path) as file_stream:
        version_match = re.search(
            r"^__version__ = ['\"]([^'\"]*)['\"]", file_stream.read(), re.M
        )
        if version_match:
            return version_match.group(1)
        raise RuntimeError(f"Failed to find version at: {version_file_path}")


with open(os.path.join(ROOT_DIR, "README.md"), "r", encoding="utf-8") as fh:
    long_description = fh.read()


setuptools.setup(
    name="acidcat",
    version=find_version("acidcat", "__init__.py"),
    description="Delta directory layout, write transaction visibility, and "
    "expected-row oracles for testing ACID table readers.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(where=".", include=["acidcat*"]),
    extras_require={
        "test": ["pytest >= 7.0"],
    },
    install_requires=[
        # any changes here should also be reflected in requirements.txt
        "msgpack >= 1.0.0",
        "pyarrow >= 17.0.0",
    ],
    setup_requires=["wheel"],
    package_data={
        "acidcat.tests.test_utils": [
            "resources/*.tbl",
            "resources/nation_delete_deltas/*/_deleted_lines",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.9",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
