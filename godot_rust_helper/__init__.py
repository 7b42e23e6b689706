"""Scaffold and manage Rust native-script modules for Godot projects."""

__version__ = "0.1.0"
