"""
Learning Algorithm Modules.

Each algorithm is self-contained in algorithms/<name>/.
"""
