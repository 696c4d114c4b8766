# services/__init__.py
