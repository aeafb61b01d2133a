from setuptools import setup, find_packages

setup(
    name="tag_vector_search",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"": ["*.json"]},
    install_requires=[
        "torch",
        "torchvision",
        "pillow",
        "numpy",
        "fastapi",
        "pydantic",
        "tqdm",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
