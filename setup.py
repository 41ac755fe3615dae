from setuptools import setup

setup(
    name="fault_hazard",
    version="0.1.0",
    packages=["fault_hazard"],
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "scipy",
        "pandas",
        "pyproj",
        "shapely>=2.0",
    ],
    extras_require={"test": ["pytest", "hypothesis"]},
    include_package_data=True,
    zip_safe=False,
)
