from setuptools import find_packages, setup

setup(
    name="flagrouter",
    version="0.1.0",
    description="Route command-line options into plain Python handlers and middlewares.",
    long_description=open("README.md", encoding="UTF-8").read(),
    long_description_content_type="text/markdown",
    author="Roland Thomas Jr",
    author_email="roland@rtj.dev",
    packages=find_packages(include=["flagrouter", "flagrouter.*"]),
    python_requires=">=3.10",
    install_requires=[
        "rich>=13.0",
        "pydantic>=2.0",
        "python-dateutil>=2.8",
        "toml>=0.10",
        "PyYAML>=6.0",
        "python-json-logger>=3.1",
    ],
    extras_require={"test": ["pytest>=8.0"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Development Status :: 3 - Alpha",
    ],
)
