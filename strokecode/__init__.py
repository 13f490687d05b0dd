"""
StrokeCode - acute stroke code decision and timeline engine.
"""
__version__ = "1.0.0"
