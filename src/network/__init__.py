# src/network/__init__.py — v1
