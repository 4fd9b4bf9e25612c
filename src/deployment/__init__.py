# src/deployment/__init__.py — v1
