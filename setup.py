"""Setup script for umappy package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="umappy",
    version="0.1.0",
    description="Uniform Manifold Approximation and Projection for dimension reduction",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "faiss-cpu>=1.7.0",
        "matplotlib>=3.3.0",
        "tqdm>=4.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=6.0.0",
        ],
        "dev": [
            "pytest>=6.0.0",
            "pytest-cov>=2.0.0",
            "black>=21.0.0",
            "isort>=5.0.0",
            "flake8>=3.9.0",
        ],
        "gpu": [
            "faiss-gpu>=1.7.0",
        ],
    },
    keywords=[
        "umap",
        "manifold-learning",
        "dimension-reduction",
        "embeddings",
        "visualization",
        "machine-learning",
    ],
)
