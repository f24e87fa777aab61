from setuptools import setup, find_packages

setup(
    name="tripcanvas",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    install_requires=[
        "requests>=2.31.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": ["pytest>=8.0"],
    },
    entry_points={
        "console_scripts": ["tripcanvas=main:main"],
    },
    python_requires=">=3.10",
)
