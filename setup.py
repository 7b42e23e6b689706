from setuptools import find_packages, setup

setup(
    name="godot-rust-helper",
    version="0.1.0",
    description="Scaffold, build and manage Rust modules for Godot projects",
    packages=find_packages(exclude=["tests", "tests.*", "dev", "dev.*"]),
    include_package_data=True,
    package_data={"godot_rust_helper": ["schemas/*.json"]},
    python_requires=">=3.8",
    install_requires=[
        # manifest schema validation on every load
        "jsonschema>=4.0.0",
        "pydantic>=2.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "godot-rust-helper=godot_rust_helper.cli:main",
        ],
    },
)
