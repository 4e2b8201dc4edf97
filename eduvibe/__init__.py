# eduvibe/__init__.py
