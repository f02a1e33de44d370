[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "readprep"
version = "0.1.0"
description = "Building blocks for FASTQ preprocessing: reading, filtering, trimming, correction, duplication estimation and report fragments"
requires-python = ">=3.10"
dependencies = []
keywords = ["fastq", "fasta", "sequencing", "adapter trimming", "quality control", "bioinformatics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["readprep"]

[tool.pytest.ini_options]
addopts = "-ra"
