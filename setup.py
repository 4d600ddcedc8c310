from setuptools import setup, find_packages
import os

# Read version from __init__.py
def get_version():
    """Get version from oclimg/__init__.py"""
    init_file = os.path.join(os.path.dirname(__file__), "oclimg", "__init__.py")
    with open(init_file, "r") as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip('"\'')
    raise RuntimeError("Unable to find version string.")

# OpenCL Runtime Notes:
# - pyopencl only binds to an ICD loader; a vendor driver (GPU or CPU) must be installed
# - pocl-binary-distribution ships a CPU driver so the device tests can run on CI machines
#
# Installation Examples:
# - Base package only: pip install oclimg
# - With test tooling and a CPU OpenCL driver: pip install "oclimg[dev]"

extras_require = {
    # Development dependencies
    "dev": [
        "pytest>=7.4.0",
        "pytest-cov>=4.1.0",
        "coverage>=7.3.2",
        "pocl-binary-distribution>=6.0",
    ],
}

setup(
    name="oclimg",
    version=get_version(),
    description="Pixel-wise image transforms dispatched onto OpenCL devices",
    long_description=open("README.md", "r", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Image Processing",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    keywords="opencl, gpu, image-processing, thresholding",
    packages=find_packages(include=["oclimg", "oclimg.*"]),
    package_data={"oclimg": ["programs/*.cl"]},
    install_requires=[
        "numpy>=1.26.4",
        "pyopencl>=2024.1",
    ],
    extras_require=extras_require,
)
