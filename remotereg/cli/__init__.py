# remotereg/cli/__init__.py
