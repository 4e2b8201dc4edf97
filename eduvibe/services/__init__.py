# eduvibe/services/__init__.py
