from setuptools import setup

setup(
    name="study_material",
    version="0.1.0",
    packages=["study_material"],
    python_requires=">=3.10",
    install_requires=[
        "pdfplumber>=0.11.0",
        "pypdfium2>=4.18.0",
        "Pillow>=9.1",
        "requests>=2.28",
        "anthropic>=0.30.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
