"""
GraphScript - Visual scripting graphs compiled to Python

Build a graph of typed nodes, translate it to Python source, and compile,
run and unload the result as an isolated unit.
"""

__version__ = "0.1.0"
