from setuptools import setup, find_namespace_packages

setup(
    name="tswio_desktop",
    version="0.1.0",
    description="TSW IO desktop launcher (backend sidecar + readiness splash)",
    author="TSW IO",
    packages=find_namespace_packages(include=["tswio_desktop", "tswio_desktop.*"]),
    install_requires=[
        "pydantic>=2.0",
        "httpx>=0.28.1",
        "pywebview>=5.0",
    ],
    extras_require={
        "dev": [
            "fastapi>=0.100.0",
            "uvicorn>=0.20.0",
        ],
        "test": [
            "pytest>=7.0",
            "fastapi>=0.100.0",
        ],
        "all": [
            "fastapi>=0.100.0",
            "uvicorn>=0.20.0",
            "pytest>=7.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "tswio-desktop=tswio_desktop.runtime.cli:main",
        ],
    },
    python_requires=">=3.9",
)
