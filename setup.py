from setuptools import setup, find_packages

setup(
    name="arrestpub",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyyaml",
        "pydantic",
        "python-dotenv",
        "requests",
        "PyJWT",
        "gradio",
        "fastapi",
        "starlette",
        "uvicorn",
        "python-multipart",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "arrestpub=arrestpub.cli:main",
            "arrestpub-ui=arrestpub.ui:main",
            "arrestpub-server=arrestpub.server:main",
        ],
    },
)
