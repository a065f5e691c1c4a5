"""
Setup script for kotoba-srs.

kotoba-srs is the adaptive review engine behind the Japanese learning
platform. It serves three roles:

1. Scheduler - modified SM-2 intervals for characters, words and grammar
2. Planner - ranks catalog items into study sessions
3. Calibrator - recall prediction and difficulty adjustment

The engine is a library: hosts inject the content catalog, performance
store and learner profile, and persist the records it returns.
"""

from setuptools import find_packages, setup

setup(
    name="kotoba-srs",
    version="1.0.0",
    description="Adaptive spaced-repetition engine for Japanese study content",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Japanese Learning Platform",
    packages=find_packages(include=["kotoba_srs", "kotoba_srs.*"]),
    python_requires=">=3.11",
    install_requires=[
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="learning spaced-repetition sm2 japanese education",
)
