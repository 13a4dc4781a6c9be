
from setuptools import setup, find_packages
setup(
    name="vector_library",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=["numpy", "zstandard", "requests", "urllib3>=2", "tqdm"],
    extras_require={"test": ["pytest"]},
    python_requires=">=3.9",
)
