"""
Setup script for kisokyu.

Kisokyu is a terminal quiz for the basic-level interior finishing trade
exam. Each 20-question session leans toward the questions you keep
missing, mixes in freshly generated true/false variants, and grades a
one-line justification after every answer.

The 'kisokyu' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="kisokyu",
    version="1.0.0",
    description="Adaptive true/false quiz with mastery boxes and reason grading",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["kisokyu", "kisokyu.*"]),
    py_modules=["config"],
    package_data={"kisokyu.delivery": ["data/*.json"]},
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
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
    entry_points={
        "console_scripts": [
            "kisokyu=kisokyu.delivery.quiz_cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz spaced-repetition cli education leitner",
)
