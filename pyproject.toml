[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "audiocontent"
version = "0.3.1"
description = "Audio content analysis: instantaneous spectral and temporal features, chord probabilities and IIR filtering"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "audio",
    "music information retrieval",
    "features",
    "chords",
    "mfcc",
    "pitch chroma",
    "butterworth",
    "filter",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = [
    "pytest",
    "numpy",
]

[tool.hatch.build.targets.wheel]
packages = ["audiocontent"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
