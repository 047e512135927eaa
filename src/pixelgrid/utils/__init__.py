"""
Utility modules for pixelgrid.
"""
