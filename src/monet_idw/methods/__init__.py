"""
Compiled kernels used by the interpolation engine.
"""
