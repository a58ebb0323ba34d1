from setuptools import setup

__version__ = "0.1.0"
VERSION = __version__

setup(
    name="dagwire",
    version=VERSION,
    description="Explicit provider graphs: validated wiring, singleton-per-graph resolution",
    packages=["dagwire", "dagwire.utils"],
    python_requires=">=3.9",
    install_requires=["typing_extensions>=4.0"],
    extras_require={
        "graphviz": ["graphviz>=0.20"],
        "test": ["pytest>=7.0", "graphviz>=0.20"],
    },
)
